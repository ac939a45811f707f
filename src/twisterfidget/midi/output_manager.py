"""MIDI output side."""

import logging

import mido

from .base_manager import BaseMidiManager

logger = logging.getLogger(__name__)


class MidiOutputManager(BaseMidiManager[mido.ports.BaseOutput]):
    """Hot-plug MIDI output. Messages sent while disconnected are dropped."""

    port_kind = "output"
    change_log_level = logging.DEBUG

    def send(self, message: mido.Message) -> bool:
        """
        Send a message to the connected device.

        Returns:
            True if the message was written, False if no device is connected
            or the port raised.
        """
        with self._port_lock:
            if self._port is None:
                return False
            try:
                self._port.send(message)
            except Exception as e:
                logger.error(f"Error sending MIDI message: {e}")
                return False
            return True

    def _get_available_ports(self) -> list[str]:
        return mido.get_output_names()

    def _open_port(self, port_name: str) -> mido.ports.BaseOutput:
        return mido.open_output(port_name)
