"""Cooperative timer scheduling.

Every hardware event and every animation tick runs on a single scheduling
domain: callbacks are executed one at a time, each to completion, so the
engine and the modes never need locks around their own state.

Two implementations share the same `Scheduler` protocol:

- `LoopScheduler` owns a daemon thread and a timer heap. MIDI input threads
  hand decoded messages over with `post()`, so input and timers interleave
  on the loop thread only.
- `ManualScheduler` keeps a virtual clock that only moves when `advance()`
  is called. Tests use it to step animations deterministically.

All times are in milliseconds.
"""

import heapq
import itertools
import logging
import threading
import time
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle:
    """Cancellable reference to a scheduled callback."""

    __slots__ = ("_callback", "deadline", "interval", "_cancelled")

    def __init__(self, callback: Callback, deadline: float, interval: Optional[float] = None):
        self._callback = callback
        self.deadline = deadline
        self.interval = interval
        self._cancelled = False

    def cancel(self) -> None:
        """Prevent any further invocation. Safe to call more than once."""
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def repeating(self) -> bool:
        return self.interval is not None

    def _run(self) -> None:
        try:
            self._callback()
        except Exception as e:
            logger.error(f"Error in scheduled callback {self._callback!r}: {e}", exc_info=True)

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "pending"
        return f"<TimerHandle deadline={self.deadline:.1f} interval={self.interval} {state}>"


class Scheduler(Protocol):
    """Protocol for anything that can run callbacks later."""

    def now(self) -> float:
        """Current time in milliseconds."""
        ...

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        """Run callback once after delay_ms."""
        ...

    def call_every(self, interval_ms: float, callback: Callback) -> TimerHandle:
        """Run callback every interval_ms until cancelled."""
        ...

    def post(self, callback: Callback) -> TimerHandle:
        """Run callback as soon as possible on the scheduling domain."""
        ...


class _TimerHeap:
    """Deadline-ordered heap; equal deadlines run in scheduling order."""

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    def push(self, handle: TimerHandle) -> None:
        heapq.heappush(self._heap, (handle.deadline, next(self._counter), handle))

    def peek_deadline(self) -> Optional[float]:
        self._drop_cancelled()
        return self._heap[0][0] if self._heap else None

    def pop(self) -> TimerHandle:
        return heapq.heappop(self._heap)[2]

    def clear(self) -> None:
        self._heap.clear()

    def pending(self) -> int:
        return sum(1 for _, _, handle in self._heap if not handle.cancelled)

    def _drop_cancelled(self) -> None:
        while self._heap and self._heap[0][2].cancelled:
            heapq.heappop(self._heap)


def _check_interval(interval_ms: float) -> float:
    if interval_ms <= 0:
        raise ValueError(f"Repeating interval must be positive, got {interval_ms}")
    return float(interval_ms)


class ManualScheduler:
    """
    Scheduler driven by a virtual clock.

    Nothing runs until `advance()` is called. Timers fire in deadline order
    and the clock reads exactly each timer's deadline while it runs, so
    animations that sample `now()` see the same values on every run.
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)
        self._timers = _TimerHeap()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle(callback, self._now + max(0.0, delay_ms))
        self._timers.push(handle)
        return handle

    def call_every(self, interval_ms: float, callback: Callback) -> TimerHandle:
        interval = _check_interval(interval_ms)
        handle = TimerHandle(callback, self._now + interval, interval)
        self._timers.push(handle)
        return handle

    def post(self, callback: Callback) -> TimerHandle:
        return self.call_later(0, callback)

    def advance(self, ms: float) -> None:
        """Move the clock forward by ms, firing every timer that comes due."""
        target = self._now + max(0.0, ms)
        while True:
            deadline = self._timers.peek_deadline()
            if deadline is None or deadline > target:
                break
            handle = self._timers.pop()
            self._now = max(self._now, handle.deadline)
            if handle.repeating:
                handle.deadline += handle.interval
                self._timers.push(handle)
            handle._run()
        self._now = target

    def run_pending(self) -> None:
        """Fire everything already due without moving the clock."""
        self.advance(0)

    @property
    def pending(self) -> int:
        """Number of timers that have not been cancelled."""
        return self._timers.pending()


class LoopScheduler:
    """
    Real-time scheduler running callbacks on one daemon thread.

    `call_later`, `call_every` and `post` are safe to call from any thread;
    the callbacks themselves always run on the loop thread.
    """

    def __init__(self, name: str = "twisterfidget-loop"):
        self._name = name
        self._timers = _TimerHeap()
        self._condition = threading.Condition()
        self._running = False
        self._thread: Optional[threading.Thread] = None

    def now(self) -> float:
        return time.monotonic() * 1000.0

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        return self._schedule(TimerHandle(callback, self.now() + max(0.0, delay_ms)))

    def call_every(self, interval_ms: float, callback: Callback) -> TimerHandle:
        interval = _check_interval(interval_ms)
        return self._schedule(TimerHandle(callback, self.now() + interval, interval))

    def post(self, callback: Callback) -> TimerHandle:
        return self.call_later(0, callback)

    def _schedule(self, handle: TimerHandle) -> TimerHandle:
        with self._condition:
            self._timers.push(handle)
            self._condition.notify()
        return handle

    def start(self) -> None:
        """Start the loop thread."""
        if self._running:
            logger.warning("LoopScheduler is already running")
            return

        self._running = True
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        logger.debug("LoopScheduler started")

    def stop(self, timeout: float = 1.0) -> None:
        """Stop the loop thread and drop all pending timers."""
        with self._condition:
            self._running = False
            self._condition.notify()

        if self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        self._thread = None

        with self._condition:
            self._timers.clear()
        logger.debug("LoopScheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    def _run(self) -> None:
        while True:
            with self._condition:
                handle = self._next_due()
                if handle is None:
                    return
            handle._run()

    def _next_due(self) -> Optional[TimerHandle]:
        """Block until a timer is due. Must be called with the condition held."""
        while self._running:
            deadline = self._timers.peek_deadline()
            now = self.now()
            if deadline is None:
                self._condition.wait()
                continue
            if deadline > now:
                self._condition.wait(timeout=(deadline - now) / 1000.0)
                continue

            handle = self._timers.pop()
            if handle.repeating:
                # Reschedule from the old deadline so intervals do not drift
                handle.deadline = max(handle.deadline + handle.interval, now)
                self._timers.push(handle)
            return handle
        return None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
