"""Chase mode: one lit ring runs around the grid."""

import logging
from typing import Optional

from twisterfidget.constants import ALL_CONTROLS, MAX_LED_VALUE

from .base import Mode

logger = logging.getLogger(__name__)

DEFAULT_SPEED_MS = 150.0
MIN_SPEED_MS = 50.0
SPEED_RANGE_MS = 450.0
SPEED_TOLERANCE_MS = 5.0


class ChaseMode(Mode):
    """Any knob turn sets the speed (clockwise is faster); any press reverses."""

    name = "chase"
    description = "A single light chases around the grid"

    def __init__(self) -> None:
        super().__init__()
        self.sequence = list(ALL_CONTROLS)
        self._reset()

    def _reset(self) -> None:
        self.position = 0
        self.speed_ms = DEFAULT_SPEED_MS
        self.direction = 1
        self._lit: Optional[int] = None
        self._ticker = None

    def on_activate(self, trigger: Optional[int]) -> None:
        self._reset()
        self.clear_leds()
        self._restart()

    def on_deactivate(self) -> None:
        super().on_deactivate()
        self._reset()

    def _restart(self) -> None:
        self.cancel_timer(self._ticker)
        self._ticker = self.call_every(self.speed_ms, self._step)

    def _step(self) -> None:
        if self._lit is not None:
            self.set_led(self._lit, 0)
        self._lit = self.sequence[self.position]
        self.set_led(self._lit, MAX_LED_VALUE)
        self.position = (self.position + self.direction) % len(self.sequence)

    def handle_turn(self, control: int, value: int) -> bool:
        speed = MIN_SPEED_MS + ((MAX_LED_VALUE - value) / MAX_LED_VALUE) * SPEED_RANGE_MS
        if abs(speed - self.speed_ms) > SPEED_TOLERANCE_MS:
            self.speed_ms = speed
            logger.info(f"Chase speed {speed:.0f}ms")
            self._restart()
        return True

    def handle_press(self, control: int) -> bool:
        self.direction = -self.direction
        if self._lit is not None:
            self.position = (self.sequence.index(self._lit) + self.direction) % len(self.sequence)
        logger.info(f"Chase direction {'forward' if self.direction == 1 else 'backward'}")
        return True
