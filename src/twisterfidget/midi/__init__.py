"""Hot-plug MIDI port management."""

from .input_manager import MidiInputManager
from .manager import MidiManager
from .output_manager import MidiOutputManager

__all__ = ["MidiManager", "MidiInputManager", "MidiOutputManager"]
