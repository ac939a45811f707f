"""Mirror mode: each knob drives the inverted ring of its partner."""

import logging
from typing import Iterable, Optional

from twisterfidget.constants import MAX_LED_VALUE, NUM_CONTROLS

from .base import Mode

logger = logging.getLogger(__name__)


def point_symmetric_pairs(num_controls: int = NUM_CONTROLS) -> list[tuple[int, int]]:
    """Pairs (c, N-1-c) for the lower half of the grid."""
    return [(c, num_controls - 1 - c) for c in range(num_controls // 2)]


class MirrorMode(Mode):
    """Turning one knob of a pair shows ``127 - value`` on the other."""

    name = "mirror"
    description = "Paired knobs show each other's inverted value"

    def __init__(self, pairs: Optional[Iterable[tuple[int, int]]] = None):
        super().__init__()
        self.pairs = list(pairs) if pairs is not None else point_symmetric_pairs()
        self.partners: dict[int, int] = {}
        for a, b in self.pairs:
            if a == b:
                raise ValueError(f"Control {a} cannot mirror itself")
            self.partners[a] = b
            self.partners[b] = a

    def on_activate(self, trigger: Optional[int]) -> None:
        self.clear_leds()
        for a, b in self.pairs:
            self.set_led(a, 0)
            self.set_led(b, MAX_LED_VALUE)
        logger.info(f"Mirroring {len(self.pairs)} pair(s)")

    def handle_turn(self, control: int, value: int) -> bool:
        partner = self.partners.get(control)
        if partner is None:
            return False
        self.set_led(partner, MAX_LED_VALUE - value)
        return True
