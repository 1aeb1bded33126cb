"""Conversion of durations to sample counts.

Every window length derived from a duration (moving average, Gaussian
smoothing, minimum event duration, simulation length) goes through
`to_samples`, so that one rounding rule applies everywhere.
"""

import numpy as np


def to_samples(duration_ms, dt):
    """Number of samples spanning `duration_ms` at a step of `dt` ms.

    Rounds half up, so that 30 / 0.1 == 299.99999999999994 still gives
    300 samples. A window is never shorter than one sample: durations
    below half a step give 1.

    Raises
    ------
    ValueError
        If `dt` is not positive.
    """
    if not dt > 0:
        raise ValueError(f"Sampling step must be positive, got dt={dt}")
    return max(1, int(np.floor(duration_ms / dt + 0.5)))
