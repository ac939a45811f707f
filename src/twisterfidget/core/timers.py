"""Timer ownership for modes.

A `TimerGroup` tracks every timer a mode has scheduled so that all of them
can be cancelled in one call when the mode is deactivated. Once closed, the
group refuses new timers until it is reopened.

A `Timeline` plays a list of (delay, action) steps one after another on a
single pending timer, replacing chains of nested callbacks.
"""

import logging
from typing import Callable, Iterable, Optional, Sequence

from .scheduler import Callback, Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class TimerGroup:
    """Set of timers owned by one mode activation."""

    def __init__(self, owner: str = ""):
        self._owner = owner
        self._scheduler: Optional[Scheduler] = None
        self._handles: set[TimerHandle] = set()

    # =================================================================
    # Lifecycle
    # =================================================================

    def open(self, scheduler: Scheduler) -> None:
        """Bind to a scheduler and start accepting timers."""
        self.cancel_all()
        self._scheduler = scheduler

    def close(self) -> None:
        """Cancel everything and refuse new timers until reopened."""
        self.cancel_all()
        self._scheduler = None

    @property
    def is_open(self) -> bool:
        return self._scheduler is not None

    # =================================================================
    # Scheduling
    # =================================================================

    def call_later(self, delay_ms: float, callback: Callback) -> Optional[TimerHandle]:
        if self._scheduler is None:
            logger.warning(f"Timer requested on closed group '{self._owner}', ignoring")
            return None

        handle: Optional[TimerHandle] = None

        def fire() -> None:
            self._handles.discard(handle)
            callback()

        handle = self._scheduler.call_later(delay_ms, fire)
        self._handles.add(handle)
        return handle

    def call_every(self, interval_ms: float, callback: Callback) -> Optional[TimerHandle]:
        if self._scheduler is None:
            logger.warning(f"Interval requested on closed group '{self._owner}', ignoring")
            return None

        handle = self._scheduler.call_every(interval_ms, callback)
        self._handles.add(handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        """Cancel one timer. None is accepted and ignored."""
        if handle is None:
            return
        handle.cancel()
        self._handles.discard(handle)

    def cancel_all(self) -> None:
        for handle in list(self._handles):
            handle.cancel()
        self._handles.clear()

    def __len__(self) -> int:
        return sum(1 for handle in self._handles if not handle.cancelled)


Step = tuple[float, Callable[[], None]]


class Timeline:
    """
    Sequential player for (delay_ms, action) steps.

    Each delay is measured from the previous step. Only one timer is pending
    at a time, and cancelling the timeline stops the remaining steps. An
    action may call `play()` again on the same timeline; the old sequence
    is abandoned in favour of the new one.
    """

    def __init__(self, timers: TimerGroup):
        self._timers = timers
        self._steps: list[Step] = []
        self._index = 0
        self._handle: Optional[TimerHandle] = None
        self._on_complete: Optional[Callback] = None
        self._generation = 0

    def play(self, steps: Iterable[Step], on_complete: Optional[Callback] = None) -> None:
        self.cancel()
        self._steps = list(steps)
        self._index = 0
        self._on_complete = on_complete
        self._schedule_next(self._generation)

    def cancel(self) -> None:
        self._generation += 1
        self._timers.cancel(self._handle)
        self._handle = None
        self._steps = []
        self._on_complete = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def _schedule_next(self, generation: int) -> None:
        if generation != self._generation:
            return

        if self._index >= len(self._steps):
            self._handle = None
            on_complete = self._on_complete
            self._on_complete = None
            if on_complete:
                on_complete()
            return

        delay, _ = self._steps[self._index]
        self._handle = self._timers.call_later(delay, lambda: self._fire(generation))

    def _fire(self, generation: int) -> None:
        if generation != self._generation:
            return
        _, action = self._steps[self._index]
        self._index += 1
        self._handle = None
        action()
        self._schedule_next(generation)


def absolute_steps(events: Sequence[tuple[float, Callable[[], None]]]) -> list[Step]:
    """Convert (absolute_time, action) pairs into relative timeline steps.

    Events are sorted by time first; ties keep their original order.
    """
    ordered = sorted(events, key=lambda event: event[0])
    steps: list[Step] = []
    previous = 0.0
    for at, action in ordered:
        steps.append((max(0.0, at - previous), action))
        previous = at
    return steps
