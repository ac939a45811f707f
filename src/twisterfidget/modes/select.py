"""Mode selection screen."""

import logging
from typing import Optional

from twisterfidget.constants import LED_OFF_VALUE

from .base import Mode

logger = logging.getLogger(__name__)

# Knob -> mode name
SELECT_MAP: dict[int, str] = {
    0: "simon",
    1: "chase",
    2: "mirror",
    3: "rainbow",
    4: "pulse",
    5: "ripple",
    6: "wave",
    7: "binary",
    8: "fibonacci",
    9: "random",
    10: "color_mixer",
    14: "photo",
    15: "normal_linking",
}

MODE_COLORS: dict[str, int] = {
    "simon": 4,
    "chase": 20,
    "mirror": 36,
    "rainbow": 60,
    "pulse": 70,
    "ripple": 85,
    "wave": 10,
    "binary": 90,
    "fibonacci": 30,
    "random": 0,
    "color_mixer": 48,
    "photo": 100,
    "normal_linking": 127,
}


def color_name(value: int) -> str:
    """Rough name of the ring hue for a 0..127 value."""
    bounds = (
        (2, "White"),
        (8, "Red"),
        (16, "Orange"),
        (24, "Amber"),
        (32, "Yellow"),
        (40, "Lime"),
        (48, "Green"),
        (64, "Cyan"),
        (80, "Blue"),
        (96, "Purple"),
        (112, "Magenta"),
        (120, "Pink"),
    )
    for limit, name in bounds:
        if value < limit:
            return name
    return "Bright White"


class ModeSelectMode(Mode):
    """Each lit knob starts a mode; the press position is passed on as trigger."""

    name = "mode_select"
    description = "Pick a mode by pressing a lit knob"

    def __init__(self, select_map: Optional[dict[int, str]] = None):
        super().__init__()
        self.select_map = dict(select_map if select_map is not None else SELECT_MAP)
        self._entries: dict[int, str] = {}

    def on_activate(self, trigger: Optional[int]) -> None:
        available = self.ctx.available_modes
        self._entries = {
            control: mode_name
            for control, mode_name in self.select_map.items()
            if mode_name in available and mode_name != self.name
        }

        self.clear_leds()
        for control, mode_name in sorted(self._entries.items()):
            color = MODE_COLORS.get(mode_name, LED_OFF_VALUE)
            self.set_led(control, color)
            logger.debug(f"Knob {control:2d}: {mode_name:<15} ({color_name(color)})")
        logger.info(f"Mode select: {len(self._entries)} mode(s) available")

    def on_deactivate(self) -> None:
        self.clear_leds(self._entries)
        self._entries = {}

    @property
    def entries(self) -> dict[int, str]:
        return dict(self._entries)

    def handle_press(self, control: int) -> bool:
        mode_name = self._entries.get(control)
        if mode_name is None:
            return False
        logger.info(f"Selected mode '{mode_name}'")
        self.ctx.switch_to(mode_name, control)
        return True
