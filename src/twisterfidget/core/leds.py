"""LED output bus shared by all modes."""

import logging
import math
from typing import Iterable, Optional, Protocol

from twisterfidget.constants import LED_OFF_VALUE, MAX_LED_VALUE, NUM_CONTROLS

logger = logging.getLogger(__name__)


class LedSink(Protocol):
    """Anything that can light a ring: the device output or a test recorder."""

    def set_led(self, control: int, value: int) -> None:
        ...


class LedBus:
    """
    Validating front for an LedSink.

    Values are floored and clamped to 0..127; writes to controls outside
    the grid are dropped with a warning.
    """

    def __init__(self, sink: LedSink, num_controls: int = NUM_CONTROLS):
        self._sink = sink
        self.num_controls = num_controls

    def set(self, control: int, value: float) -> None:
        if not 0 <= control < self.num_controls:
            logger.warning(f"Ignoring LED write to out-of-range control {control}")
            return

        clamped = max(LED_OFF_VALUE, min(MAX_LED_VALUE, math.floor(value)))
        self._sink.set_led(control, clamped)

    def clear(self, controls: Iterable[int]) -> None:
        for control in controls:
            self.set(control, LED_OFF_VALUE)

    def clear_all(self) -> None:
        self.clear(range(self.num_controls))

    def fill(self, value: float, controls: Optional[Iterable[int]] = None) -> None:
        for control in controls if controls is not None else range(self.num_controls):
            self.set(control, value)
