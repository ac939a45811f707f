"""Idle mode: rings follow their knobs, and knobs can be linked to follow each other."""

import logging
from typing import Optional

from twisterfidget.constants import MAX_LED_VALUE

from .base import Mode

logger = logging.getLogger(__name__)

FLASH_MS = 200


class NormalLinkingMode(Mode):
    """
    Every ring shows its knob position.

    Pressing a knob selects it as a link source (its ring flashes), pressing
    a second knob links it as a destination: from then on the destination
    ring follows the source knob. A destination has at most one source.
    Pressing the source again cancels the pending link.
    """

    name = "normal_linking"
    description = "Rings follow knobs; press two knobs to link them"

    def __init__(self) -> None:
        super().__init__()
        self._reset()

    def _reset(self) -> None:
        self.pending_source: Optional[int] = None
        self.links: dict[int, list[int]] = {}
        self.knob_values: dict[int, int] = {}
        self._flash = None

    def on_activate(self, trigger: Optional[int]) -> None:
        self._reset()
        self.clear_leds()
        logger.info("Normal/linking mode: press a knob, then another, to link them")

    def on_deactivate(self) -> None:
        super().on_deactivate()
        self._reset()

    def handle_turn(self, control: int, value: int) -> bool:
        self.knob_values[control] = value
        for destination in self.links.get(control, ()):
            self.set_led(destination, value)
        self.set_led(control, value)
        # Turns stay unconsumed so a fallback handler may also see them
        return False

    def handle_press(self, control: int) -> bool:
        if self.pending_source is None:
            self._select_source(control)
        elif self.pending_source == control:
            logger.info(f"Link cancelled on control {control}")
            self._end_flash()
            self.set_led(control, self.knob_values.get(control, 0))
            self.pending_source = None
        else:
            self.link(self.pending_source, control)
        return True

    def _select_source(self, control: int) -> None:
        self.pending_source = control
        logger.info(f"Link source: control {control}")
        self._end_flash()
        self.set_led(control, MAX_LED_VALUE)
        self._flash = self.call_later(FLASH_MS, lambda: self._restore(control))

    def _restore(self, control: int) -> None:
        self._flash = None
        self.set_led(control, self.knob_values.get(control, 0))

    def _end_flash(self) -> None:
        self.cancel_timer(self._flash)
        self._flash = None

    def link(self, source: int, destination: int) -> None:
        """Make `destination` follow `source`, detaching it from any other source."""
        logger.info(f"Linking {source} -> {destination}")
        destinations = self.links.setdefault(source, [])
        if destination not in destinations:
            destinations.append(destination)
            for other, others in self.links.items():
                if other != source and destination in others:
                    others.remove(destination)

        source_value = self.knob_values.get(source, 0)
        self._end_flash()
        self.set_led(destination, source_value)
        self.set_led(source, source_value)
        self.pending_source = None

    def destinations_of(self, source: int) -> list[int]:
        return list(self.links.get(source, ()))
