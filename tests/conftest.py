"""Pytest fixtures for tests."""

import random
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from twisterfidget.constants import NUM_CONTROLS
from twisterfidget.core import LedBus, ManualScheduler, ModeEngine
from twisterfidget.modes import ModeContext, build_default_modes


class RecordingLedSink:
    """LedSink that remembers every write and the last value per control."""

    def __init__(self):
        self.writes: list[tuple[int, int]] = []
        self.state: dict[int, int] = {}

    def set_led(self, control: int, value: int) -> None:
        self.writes.append((control, value))
        self.state[control] = value

    def value(self, control: int) -> int:
        return self.state.get(control, 0)

    def lit(self) -> set[int]:
        return {control for control, value in self.state.items() if value > 0}

    def reset(self) -> None:
        self.writes.clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory that gets cleaned up."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def sink():
    return RecordingLedSink()


@pytest.fixture
def leds(sink):
    return LedBus(sink, num_controls=NUM_CONTROLS)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def engine(leds, scheduler, rng):
    """Engine wired with every built-in mode (no photo uploader)."""
    return ModeEngine(leds, scheduler, modes=build_default_modes(rng=rng))


@pytest.fixture
def activate(leds, scheduler):
    """Activate a single mode outside the engine; returns the switch_to mock calls."""
    switches: list[tuple] = []

    def switch_to(name, triggering_control=None):
        switches.append((name, triggering_control))
        return True

    def _activate(mode, trigger=None, available=frozenset()):
        ctx = ModeContext(
            leds=leds,
            scheduler=scheduler,
            switch_to=switch_to,
            triggering_control=trigger,
            available_modes=frozenset(available),
        )
        mode.activate(ctx)
        return switches

    return _activate
