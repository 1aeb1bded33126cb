"""analysis — Sleep-state transition analysis of SHC runs."""

from .transition import (
    SleepProtocol,
    TransitionResult,
    phase_table,
    detection_epochs,
    load_trajectory,
    analyze_transition,
)
