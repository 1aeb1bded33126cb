"""signal — LFP band extraction and sharp-wave ripple detection."""

from .filters import (
    RIPPLE_BAND,
    THETA_BAND,
    bandpass_filter,
    ripple_band,
    theta_band,
)
from .swr import (
    SWRDetectionConfig,
    RippleEvent,
    centered_convolve,
    gaussian_window,
    ripple_envelope,
    detection_threshold,
    segment_events,
    detect_swrs,
    events_frame,
)
