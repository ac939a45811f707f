"""Ripple mode: light spreads from the center knob to its neighbors."""

import logging
from typing import Optional

from twisterfidget.constants import MAX_LED_VALUE, NUM_CONTROLS
from twisterfidget.core.timers import Timeline, absolute_steps

from .base import Mode

logger = logging.getLogger(__name__)

DEFAULT_SPEED_MS = 100.0
FADE_MS = 150
SPEED_TOLERANCE_MS = 5.0


def ripple_neighbors(center: int, num_controls: int = NUM_CONTROLS) -> list[int]:
    """Neighbors in lighting order: orthogonal first, then diagonal."""
    offsets = (-4, -1, 1, 4, -5, -3, 3, 5)
    return [center + offset for offset in offsets if 0 <= center + offset < num_controls]


class RippleMode(Mode):
    """
    The center is the knob that selected this mode.

    Turning the center knob sets the delay between neighbors (30..300 ms);
    pressing it plays the ripple again.
    """

    name = "ripple"
    description = "Light ripples out from the selecting knob"

    def __init__(self) -> None:
        super().__init__()
        self._timeline = Timeline(self.timers)
        self.center = 0
        self.speed_ms = DEFAULT_SPEED_MS
        self.neighbors: list[int] = []

    def on_activate(self, trigger: Optional[int]) -> None:
        if trigger is None:
            logger.warning("Ripple mode needs a triggering control, using 0")
            trigger = 0
        self.center = trigger
        self.speed_ms = DEFAULT_SPEED_MS
        self.neighbors = ripple_neighbors(self.center)
        self.trigger()

    def trigger(self) -> None:
        logger.info(f"Ripple from {self.center} at {self.speed_ms:.0f}ms/step")
        self.clear_leds()
        self.set_led(self.center, MAX_LED_VALUE)

        events = []
        for index, control in enumerate(self.neighbors):
            at = self.speed_ms * (index + 1)
            events.append((at, lambda c=control: self.set_led(c, MAX_LED_VALUE)))
            events.append((at + FADE_MS, lambda c=control: self.set_led(c, 0)))
        events.append((self.speed_ms * (len(self.neighbors) + 1) + FADE_MS, lambda: self.set_led(self.center, 0)))

        self._timeline.play(absolute_steps(events))

    def handle_turn(self, control: int, value: int) -> bool:
        if control != self.center:
            return False
        speed = 30 + (value / MAX_LED_VALUE) * 270
        if abs(speed - self.speed_ms) > SPEED_TOLERANCE_MS:
            self.speed_ms = speed
            logger.info(f"Ripple speed {speed:.0f}ms/step")
        return True

    def handle_press(self, control: int) -> bool:
        if control != self.center:
            return False
        self.trigger()
        return True
