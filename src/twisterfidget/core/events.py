"""Input events decoded from the controller."""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class TurnEvent:
    """Knob rotated to an absolute position 0..127."""

    control: int
    value: int


@dataclass(frozen=True)
class PressEvent:
    control: int


@dataclass(frozen=True)
class ReleaseEvent:
    control: int


InputEvent = Union[TurnEvent, PressEvent, ReleaseEvent]
