"""
Midi Fighter Twister adapter.

Input: the Twister reports knob turns as control-change messages on the
knob channel (absolute value 0..127) and push-button presses as
control-change messages on the button channel (127 = press, 0 = release).
The CC number is the control index 0..15 in both cases.

Output: ring LEDs are driven by control-change messages on the LED
channel, with the same CC numbering.
"""

import logging
from typing import Callable, Optional

import mido

from twisterfidget.constants import (
    BUTTON_CHANNEL,
    BUTTON_PRESS_VALUE,
    BUTTON_RELEASE_VALUE,
    CONTROL_CHANGE,
    KNOB_CHANNEL,
    LED_CHANNEL,
    MAX_LED_VALUE,
    NUM_CONTROLS,
)
from twisterfidget.core.events import InputEvent, PressEvent, ReleaseEvent, TurnEvent
from twisterfidget.midi import MidiManager

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_NAME = "Midi Fighter Twister"


class TwisterInput:
    """Decodes raw control-change tuples into input events."""

    def __init__(
        self,
        knob_channel: int = KNOB_CHANNEL,
        button_channel: int = BUTTON_CHANNEL,
        num_controls: int = NUM_CONTROLS,
    ):
        self.knob_channel = knob_channel
        self.button_channel = button_channel
        self.num_controls = num_controls

    def parse(self, status: int, control: int, value: int) -> Optional[InputEvent]:
        """
        Decode one (status, control, value) tuple.

        Returns:
            The decoded event, or None when the message is not a
            control-change on a known channel, the control is outside the
            grid, or a button value is neither press nor release.
        """
        if status & 0xF0 != CONTROL_CHANGE:
            return None

        if not 0 <= control < self.num_controls:
            logger.debug(f"Dropping event for out-of-range control {control}")
            return None

        channel = status & 0x0F
        if channel == self.knob_channel:
            return TurnEvent(control, max(0, min(MAX_LED_VALUE, value)))

        if channel == self.button_channel:
            if value == BUTTON_PRESS_VALUE:
                return PressEvent(control)
            if value == BUTTON_RELEASE_VALUE:
                return ReleaseEvent(control)
            logger.debug(f"Ignoring button value {value} on control {control}")
            return None

        return None

    def parse_message(self, msg: mido.Message) -> Optional[InputEvent]:
        if msg.type != "control_change":
            return None
        return self.parse(CONTROL_CHANGE | msg.channel, msg.control, msg.value)


class TwisterOutput:
    """LED sink writing ring values as control-change messages."""

    def __init__(self, send: Callable[[mido.Message], bool], led_channel: int = LED_CHANNEL):
        self._send = send
        self.led_channel = led_channel

    def set_led(self, control: int, value: int) -> None:
        msg = mido.Message("control_change", channel=self.led_channel, control=control, value=value)
        if not self._send(msg):
            logger.debug(f"LED write to {control} dropped, device not connected")


class TwisterController:
    """
    Hot-plugging Twister connection.

    Composes a MidiManager with a port-name filter. Incoming messages are
    forwarded raw to the `on_message` callback; decoding happens on the
    scheduling thread.
    """

    def __init__(
        self,
        device_name: str = DEFAULT_DEVICE_NAME,
        led_channel: int = LED_CHANNEL,
        poll_interval: float = 2.0,
    ):
        self.device_name = device_name
        self._midi = MidiManager(device_filter=self._device_filter, poll_interval=poll_interval)
        self._midi.on_connection_changed(self._handle_connection_changed)
        self.output = TwisterOutput(self._midi.send, led_channel)

    # ================================================================
    # LIFECYCLE
    # ================================================================

    def start(self) -> None:
        self._midi.start()
        logger.info(f"Waiting for '{self.device_name}'")

    def stop(self) -> None:
        self._midi.stop()
        logger.info("TwisterController stopped")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    # ================================================================
    # CONNECTION
    # ================================================================

    def _device_filter(self, port_name: str) -> bool:
        return self.device_name.lower() in port_name.lower()

    def _handle_connection_changed(self, connected: bool, port_name: Optional[str]) -> None:
        if connected:
            logger.info(f"Twister connected on {port_name}")
        else:
            logger.warning("Twister disconnected")

    def on_message(self, callback: Callable[[mido.Message], None]) -> None:
        self._midi.on_message(callback)

    @property
    def is_connected(self) -> bool:
        return self._midi.is_connected

    @staticmethod
    def list_ports() -> dict[str, list[str]]:
        return MidiManager.list_ports()
