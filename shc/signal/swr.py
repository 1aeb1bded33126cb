"""Sharp-wave ripple (SWR) detection on ripple-band traces.

The detector turns a bandpassed trace into a smooth power envelope and
cuts it into events:

1. square every sample;
2. moving average over 10 ms, then square root (an RMS estimate);
3. convolution with a 50 ms Gaussian window (MATLAB `gausswin` shape
   0.65, normalized to unit area);
4. threshold = median + 1.2 standard deviations of the whole envelope;
5. run-length segmentation with a 30 ms minimum duration.

Both convolutions return the centred part of the full convolution with
the length of the input. For even kernels the centre is taken as in
MATLAB's `conv(..., 'same')`, one sample later than numpy's `'same'`.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.signal import windows

from shc.utils import get_logger, to_samples

LOG = get_logger("signal.swr")


# ---------------------------------------------------------------------------
# Configuration and event records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SWRDetectionConfig:
    """Window lengths and threshold of the SWR detector.

    Attributes
    ----------
    rms_window_ms : float
        Moving-average window of the RMS estimate (ms).
    gaussian_window_ms : float
        Length of the Gaussian smoothing window (ms).
    gaussian_alpha : float
        Shape of the Gaussian window: std = (L - 1) / (2 alpha).
    threshold_sd : float
        Standard deviations above the median for the threshold.
    min_duration_ms : float
        Time the envelope must stay above threshold after an onset (ms).
    """
    rms_window_ms: float = 10.0
    gaussian_window_ms: float = 50.0
    gaussian_alpha: float = 0.65
    threshold_sd: float = 1.2
    min_duration_ms: float = 30.0


@dataclass(frozen=True)
class RippleEvent:
    """A detected SWR, in samples of the trace it was detected in."""
    start: int
    duration: int

    @property
    def stop(self):
        """First sample after the event."""
        return self.start + self.duration

    @property
    def center(self):
        return self.start + self.duration // 2

    def shifted(self, offset):
        """The same event in a trace where this one starts at `offset`."""
        return RippleEvent(start=self.start + offset, duration=self.duration)


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------

def centered_convolve(x, kernel):
    """Convolution cropped to len(x), centred like MATLAB's `'same'` mode."""
    full = np.convolve(x, kernel)
    start = len(kernel) // 2
    return full[start:start + len(x)]


def gaussian_window(n_samples, alpha):
    """Unit-area Gaussian window, MATLAB `gausswin(n, alpha)` shape."""
    std = (n_samples - 1) / (2.0 * alpha)
    w = windows.gaussian(n_samples, std, sym=True)
    return w / w.sum()


def ripple_envelope(signal, dt, config=None):
    """Smoothed RMS power envelope of `signal`.

    Parameters
    ----------
    signal : array-like
        1-D ripple-band trace.
    dt : float
        Sampling step (ms).
    config : SWRDetectionConfig, optional

    Returns
    -------
    np.ndarray
        Envelope, same length as `signal`.
    """
    config = config or SWRDetectionConfig()
    power = np.asarray(signal, dtype=np.float64) ** 2

    n_rms = to_samples(config.rms_window_ms, dt)
    moving_average = centered_convolve(power, np.ones(n_rms) / n_rms)
    rms = np.sqrt(np.maximum(moving_average, 0.0))

    n_gauss = to_samples(config.gaussian_window_ms, dt)
    return centered_convolve(rms, gaussian_window(n_gauss, config.gaussian_alpha))


# ---------------------------------------------------------------------------
# Threshold and segmentation
# ---------------------------------------------------------------------------

def detection_threshold(envelope, n_sd=1.2):
    """median + n_sd * sample standard deviation, over the whole envelope."""
    envelope = np.asarray(envelope, dtype=np.float64)
    return float(np.median(envelope) + n_sd * np.std(envelope, ddof=1))


def segment_events(envelope, threshold, min_samples):
    """Cut the envelope into non-overlapping supra-threshold events.

    A cursor walks the envelope in one of two states.

    Scanning: at sample i, the event is confirmed only if samples i to
    i + min_samples are all at or above threshold and sample
    i + min_samples + 1 lies before the last sample. Otherwise the cursor
    moves to i + 1, so an onset one sample later is tested again.

    Inside an event: the end moves forward from i + min_samples + 1 while
    the envelope stays at or above threshold, stopping at the first
    sample below threshold or at the last sample. If the end did not move
    at all, the candidate is dropped and scanning resumes at i + 1.
    Otherwise the event (i, end - i) is recorded and scanning resumes at
    `end`.

    NaN samples count as below threshold.

    Parameters
    ----------
    envelope : array-like
        1-D envelope.
    threshold : float
        Detection threshold.
    min_samples : int
        Minimum-duration window, in samples.

    Returns
    -------
    list of RippleEvent
        In strictly increasing start order, non-overlapping.
    """
    if min_samples < 1:
        raise ValueError(f"min_samples must be at least 1, got {min_samples}")

    above = np.asarray(envelope, dtype=np.float64) >= threshold
    n = len(above)
    last = n - 1

    events = []
    cursor = 0
    while cursor < n - min_samples:
        if not above[cursor]:
            cursor += 1
            continue

        window_end = cursor + min_samples + 1
        if window_end >= last or not above[cursor + 1:window_end].all():
            cursor += 1
            continue

        end = window_end
        while above[end] and end < last:
            end += 1

        if end == window_end:
            cursor += 1
            continue

        events.append(RippleEvent(start=cursor, duration=end - cursor))
        cursor = end

    return events


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

def detect_swrs(signal, dt, config=None):
    """Detect SWRs in a ripple-band trace.

    Parameters
    ----------
    signal : array-like
        1-D trace, usually the 100-250 Hz band of the CA1 LFP.
    dt : float
        Sampling step (ms).
    config : SWRDetectionConfig, optional

    Returns
    -------
    list of RippleEvent
        Start and duration in samples of `signal`. Empty if nothing
        crosses the threshold for long enough.
    """
    config = config or SWRDetectionConfig()
    signal = np.asarray(signal, dtype=np.float64)
    if signal.ndim != 1:
        raise ValueError(f"Expected a 1-D signal, got shape {signal.shape}")

    min_samples = to_samples(config.min_duration_ms, dt)
    if signal.size <= min_samples + 1:
        LOG.debug("Signal of %d samples is too short for SWR detection",
                  signal.size)
        return []

    envelope = ripple_envelope(signal, dt, config)
    if np.ptp(envelope) == 0:
        # a flat envelope carries no transient power
        return []

    threshold = detection_threshold(envelope, config.threshold_sd)
    events = segment_events(envelope, threshold, min_samples)

    LOG.info("Detected %d SWRs in %.1f ms of signal (threshold %.4g)",
             len(events), signal.size * dt, threshold)
    return events


def events_frame(events, dt):
    """SWR events as a DataFrame, in samples and in milliseconds."""
    columns = ["start", "duration", "center",
               "start_ms", "duration_ms", "center_ms"]
    if not events:
        return pd.DataFrame(columns=columns)

    starts = np.array([e.start for e in events])
    durations = np.array([e.duration for e in events])
    centers = np.array([e.center for e in events])
    return pd.DataFrame({
        "start": starts,
        "duration": durations,
        "center": centers,
        "start_ms": starts * dt,
        "duration_ms": durations * dt,
        "center_ms": centers * dt,
    }, columns=columns)
