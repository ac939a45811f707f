"""Combined MIDI input and output for one device."""

import logging
from typing import Callable, Optional

import mido

from .base_manager import ConnectionCallback
from .input_manager import MidiInputManager
from .output_manager import MidiOutputManager

logger = logging.getLogger(__name__)


class MidiManager:
    """Pairs a hot-plug input and output that match the same device filter."""

    def __init__(
        self,
        device_filter: Callable[[str], bool],
        poll_interval: float = 2.0,
        port_selector: Optional[Callable[[list[str]], Optional[str]]] = None,
    ):
        self._input_manager = MidiInputManager(device_filter, poll_interval, port_selector)
        self._output_manager = MidiOutputManager(device_filter, poll_interval, port_selector)

    def on_message(self, callback: Callable[[mido.Message], None]) -> None:
        self._input_manager.on_message(callback)

    def on_connection_changed(self, callback: ConnectionCallback) -> None:
        """Register callback for both sides; it fires once per side."""
        self._input_manager.on_connection_changed(callback)
        self._output_manager.on_connection_changed(callback)

    def send(self, message: mido.Message) -> bool:
        return self._output_manager.send(message)

    def start(self) -> None:
        self._input_manager.start()
        self._output_manager.start()
        logger.debug("MidiManager started")

    def stop(self) -> None:
        self._input_manager.stop()
        self._output_manager.stop()
        logger.debug("MidiManager stopped")

    @property
    def is_connected(self) -> bool:
        return self._input_manager.is_connected and self._output_manager.is_connected

    @property
    def current_input_port(self) -> Optional[str]:
        return self._input_manager.current_port

    @property
    def current_output_port(self) -> Optional[str]:
        return self._output_manager.current_port

    @staticmethod
    def list_ports() -> dict[str, list[str]]:
        """All MIDI port names, keyed by 'input' and 'output'."""
        return {
            "input": mido.get_input_names(),
            "output": mido.get_output_names(),
        }

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
