"""
Simple utilities shared by the model and signal code.
"""
from .logging import get_logger, set_level, get_level
from .sampling import to_samples
