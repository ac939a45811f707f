"""Animation-only modes that paint the whole grid."""

import logging
import math
import random
from typing import Optional

from twisterfidget.constants import ALL_CONTROLS, MAX_LED_VALUE, NUM_CONTROLS

from .base import Mode

logger = logging.getLogger(__name__)


class RainbowMode(Mode):
    """Static gradient across the grid; any knob turn rotates it."""

    name = "rainbow"
    description = "Static color gradient, turn to rotate"

    def __init__(self) -> None:
        super().__init__()
        self.offset = 0

    def on_activate(self, trigger: Optional[int]) -> None:
        self.offset = 0
        self._paint()

    def _paint(self) -> None:
        for index, control in enumerate(ALL_CONTROLS):
            shifted = (index + self.offset) % NUM_CONTROLS
            self.set_led(control, math.floor(shifted / NUM_CONTROLS * MAX_LED_VALUE))

    def handle_turn(self, control: int, value: int) -> bool:
        offset = math.floor(value / MAX_LED_VALUE * (NUM_CONTROLS - 1))
        if offset != self.offset:
            self.offset = offset
            logger.debug(f"Rainbow offset {offset}")
            self._paint()
        return True


class WaveMode(Mode):
    """Sine wave rolling across the grid."""

    name = "wave"
    description = "Sine wave rolling across the grid"
    tick_ms = 50
    phase_step = 0.1

    def __init__(self) -> None:
        super().__init__()
        self.phase = 0.0

    def on_activate(self, trigger: Optional[int]) -> None:
        self.phase = 0.0
        self.clear_leds()
        self.call_every(self.tick_ms, self._tick)

    def _tick(self) -> None:
        for index, control in enumerate(ALL_CONTROLS):
            self.set_led(control, math.floor(63.5 + 63.5 * math.sin(self.phase + index * 0.5)))
        self.phase += self.phase_step
        if self.phase > 2 * math.pi:
            self.phase -= 2 * math.pi


class RandomMode(Mode):
    """Random ring values; turn sets the refresh rate, press freezes."""

    name = "random"
    description = "Random values, turn for speed, press to freeze"

    DEFAULT_SPEED_MS = 200.0
    SPEED_TOLERANCE_MS = 10.0

    def __init__(self, rng: Optional[random.Random] = None):
        super().__init__()
        self._rng = rng or random.Random()
        self.speed_ms = self.DEFAULT_SPEED_MS
        self.frozen = False
        self._ticker = None

    def on_activate(self, trigger: Optional[int]) -> None:
        self.speed_ms = self.DEFAULT_SPEED_MS
        self.frozen = False
        self._ticker = None
        self.clear_leds()
        self._restart()

    def _restart(self) -> None:
        self.cancel_timer(self._ticker)
        self._ticker = self.call_every(self.speed_ms, self._tick)

    def _tick(self) -> None:
        if self.frozen:
            return
        for control in ALL_CONTROLS:
            self.set_led(control, self._rng.randrange(MAX_LED_VALUE + 1))

    def handle_turn(self, control: int, value: int) -> bool:
        speed = 50 + ((MAX_LED_VALUE - value) / MAX_LED_VALUE) * 950
        if abs(speed - self.speed_ms) > self.SPEED_TOLERANCE_MS:
            self.speed_ms = speed
            logger.info(f"Random speed {speed:.0f}ms")
            if not self.frozen:
                self._restart()
        return True

    def handle_press(self, control: int) -> bool:
        self.frozen = not self.frozen
        logger.info(f"Random mode {'frozen' if self.frozen else 'running'}")
        if not self.frozen:
            self._restart()
        return True


def normalized_fibonacci(count: int = 20) -> list[int]:
    """First `count` Fibonacci numbers scaled so the largest is 127."""
    fib = [0, 1]
    while len(fib) < count:
        fib.append(fib[-1] + fib[-2])
    fib = fib[:count]
    largest = max(fib)
    if largest <= 0:
        return [0] * len(fib)
    return [math.floor(n / largest * MAX_LED_VALUE) for n in fib]


class FibonacciMode(Mode):
    """Scrolls the normalized Fibonacci sequence across the grid."""

    name = "fibonacci"
    description = "Fibonacci numbers scrolling across the grid"
    tick_ms = 300

    def __init__(self) -> None:
        super().__init__()
        self.values = normalized_fibonacci()
        self.position = 0

    def on_activate(self, trigger: Optional[int]) -> None:
        self.position = 0
        self.clear_leds()
        self.call_every(self.tick_ms, self._tick)

    def _tick(self) -> None:
        for index, control in enumerate(ALL_CONTROLS):
            self.set_led(control, self.values[(self.position + index) % len(self.values)])
        self.position = (self.position + 1) % len(self.values)


class PulseMode(Mode):
    """The knob that selected this mode breathes up and down."""

    name = "pulse"
    description = "The selecting knob breathes"
    tick_ms = 50
    step = 5

    def __init__(self) -> None:
        super().__init__()
        self.control = 0
        self.value = 0
        self.direction = 1

    def on_activate(self, trigger: Optional[int]) -> None:
        if trigger is None:
            logger.warning("Pulse mode needs a triggering control, using 0")
            trigger = 0
        self.control = trigger
        self.value = 0
        self.direction = 1
        self.clear_leds()
        logger.info(f"Pulsing control {self.control}")
        self.call_every(self.tick_ms, self._tick)

    def _tick(self) -> None:
        self.value += self.direction * self.step
        if self.value >= MAX_LED_VALUE:
            self.value = MAX_LED_VALUE
            self.direction = -1
        elif self.value <= 0:
            self.value = 0
            self.direction = 1
        self.set_led(self.control, self.value)
