"""CLI commands for twisterfidget."""

from .config import config
from .midi import midi_group
from .modes import modes_command

__all__ = ["config", "midi_group", "modes_command"]
