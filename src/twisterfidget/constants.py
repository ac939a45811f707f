"""Hardware constants for the Midi Fighter Twister."""

from enum import IntEnum

NUM_CONTROLS = 16
"""Number of knob/button pairs on the device."""

GRID_WIDTH = 4
"""Controls are laid out as a 4x4 grid, row-major from the top left."""

ALL_CONTROLS: tuple[int, ...] = tuple(range(NUM_CONTROLS))

MAX_LED_VALUE = 127
LED_OFF_VALUE = 0

CONTROL_CHANGE = 0xB0  # High nibble of a control-change status byte

KNOB_CHANNEL = 0  # Turns arrive here (0-based)
BUTTON_CHANNEL = 1  # Press/release arrive here
LED_CHANNEL = 1  # Indicator LED overrides are sent here

BUTTON_PRESS_VALUE = 127
BUTTON_RELEASE_VALUE = 0


class LedColor(IntEnum):
    """Indicator LED color values (the LED maps 0-127 onto a hue wheel)."""

    OFF = 0
    NAVY = 40
    CYAN = 48
    TURQUOISE = 52
    TEAL = 56
    GREEN = 64
    LIME = 80
    OLIVE = 88
    YELLOW = 96
    CORAL = 100
    INDIGO = 104
    ORANGE = 108
    PURPLE = 112
    MAGENTA = 116
    PINK = 120
    MAROON = 124
    RED = 127
