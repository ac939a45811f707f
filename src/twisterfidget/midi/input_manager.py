"""MIDI input side: forwards incoming messages to a single callback."""

import logging
from collections.abc import Callable

import mido

from .base_manager import BaseMidiManager

logger = logging.getLogger(__name__)


class MidiInputManager(BaseMidiManager[mido.ports.BaseInput]):
    """Hot-plug MIDI input delivering every message to `on_message`."""

    port_kind = "input"

    def __init__(self, device_filter: Callable[[str], bool], poll_interval: float = 2.0, port_selector=None):
        super().__init__(device_filter, poll_interval, port_selector)
        self._message_callback: Callable[[mido.Message], None] | None = None

    def on_message(self, callback: Callable[[mido.Message], None]) -> None:
        """
        Register the message callback.

        The callback runs on mido's I/O thread, so it should only hand the
        message over (for example with `Scheduler.post`) and return.
        """
        self._message_callback = callback

    def _get_available_ports(self) -> list[str]:
        return mido.get_input_names()

    def _open_port(self, port_name: str) -> mido.ports.BaseInput:
        return mido.open_input(port_name, callback=self._midi_callback)

    def _midi_callback(self, msg: mido.Message) -> None:
        if self._message_callback is None:
            return
        try:
            self._message_callback(msg)
        except Exception as e:
            logger.error(f"Error in MIDI input callback: {e}", exc_info=True)
