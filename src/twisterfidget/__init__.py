"""Twisterfidget: interchangeable LED modes and games for the Midi Fighter Twister."""

__version__ = "0.1.0"

from .core import ModeEngine
from .modes import Mode, build_default_modes

__all__ = [
    "Mode",
    "ModeEngine",
    "build_default_modes",
]
