"""Core engine: scheduling, LED output, input events and mode dispatch."""

from .engine import DEFAULT_LONG_PRESS_MS, MODE_SELECT, ModeEngine
from .events import InputEvent, PressEvent, ReleaseEvent, TurnEvent
from .leds import LedBus, LedSink
from .observer import ModeEvent, ModeObserver, ObserverManager
from .scheduler import LoopScheduler, ManualScheduler, Scheduler, TimerHandle
from .timers import Timeline, TimerGroup

__all__ = [
    "DEFAULT_LONG_PRESS_MS",
    "MODE_SELECT",
    "ModeEngine",
    "InputEvent",
    "PressEvent",
    "ReleaseEvent",
    "TurnEvent",
    "LedBus",
    "LedSink",
    "ModeEvent",
    "ModeObserver",
    "ObserverManager",
    "LoopScheduler",
    "ManualScheduler",
    "Scheduler",
    "TimerHandle",
    "Timeline",
    "TimerGroup",
]
