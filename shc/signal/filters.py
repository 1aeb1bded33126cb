"""Zero-phase bandpass filtering of LFP traces.

Butterworth designs are applied as second-order sections.
"""

import numpy as np
from scipy.signal import butter, sosfiltfilt

RIPPLE_BAND = (100.0, 250.0, 4)
THETA_BAND = (4.0, 12.0, 3)


def bandpass_filter(signal, low_hz, high_hz, fs, order):
    """Butterworth bandpass applied forward and backward.

    Parameters
    ----------
    signal : array-like
        1-D trace.
    low_hz, high_hz : float
        Cutoff frequencies (Hz).
    fs : float
        Sampling rate (Hz).
    order : int
        Butterworth order.

    Returns
    -------
    np.ndarray
        Filtered trace, same length as `signal`, without phase shift.
    """
    nyquist = 0.5 * fs
    if not 0 < low_hz < high_hz < nyquist:
        raise ValueError(
            f"Need 0 < low ({low_hz}) < high ({high_hz}) < fs/2 ({nyquist}) Hz"
        )
    sos = butter(order, [low_hz / nyquist, high_hz / nyquist], btype="bandpass",
                 output="sos")
    return sosfiltfilt(sos, np.asarray(signal, dtype=np.float64))


def ripple_band(signal, fs):
    """Ripple oscillations, 100-250 Hz."""
    low, high, order = RIPPLE_BAND
    return bandpass_filter(signal, low, high, fs, order)


def theta_band(signal, fs):
    """Theta oscillations, 4-12 Hz."""
    low, high, order = THETA_BAND
    return bandpass_filter(signal, low, high, fs, order)
