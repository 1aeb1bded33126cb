"""shc — Simulation of cholinergically modulated hippocampal oscillations.

An eight-variable neural-mass model (the SHC model) of CA3, CA1 and the
cholinergic medial septum, with the signal processing used to find
sharp-wave ripples in its CA1 local field potential.

Subpackages:
    model     Parameter set, state derivative and RK4 integrator
    signal    Bandpass filters and sharp-wave ripple detection
    analysis  SWS-REM transition analysis
    utils     Logging and sample-count helpers
"""

__version__ = "0.1.0"
