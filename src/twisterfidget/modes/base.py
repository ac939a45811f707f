"""Base class for all controller modes."""

import logging
from abc import ABC
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Iterable, Optional

from twisterfidget.constants import ALL_CONTROLS, LED_OFF_VALUE
from twisterfidget.core.leds import LedBus
from twisterfidget.core.scheduler import Callback, Scheduler, TimerHandle
from twisterfidget.core.timers import TimerGroup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModeContext:
    """
    Everything a mode may touch while it is active.

    Attributes:
        leds: LED bus for the whole grid
        scheduler: Scheduling domain shared with the engine
        switch_to: Callable requesting a mode switch by registry name
        triggering_control: Control whose press selected this mode, if any
        available_modes: Names currently registered with the engine
    """

    leds: LedBus
    scheduler: Scheduler
    switch_to: Callable[..., bool]
    triggering_control: Optional[int] = None
    available_modes: frozenset[str] = field(default_factory=frozenset)


class Mode(ABC):
    """
    A pluggable state machine owning the full grid while it is active.

    Lifecycle:
        A mode is constructed once and may be activated and deactivated
        many times. `activate()` must fully reset the mode, so subclasses
        put their setup in `on_activate()` and re-initialise every field
        there. `deactivate()` cancels every timer the mode created through
        `call_later`/`call_every` and clears the LEDs it claims.

    Input:
        `handle_turn`, `handle_press` and `handle_release` return True when
        the event was consumed. The default implementations ignore input.

    Subclasses set `name` (registry key) and optionally `claimed_controls`,
    the controls cleared on deactivation.
    """

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    claimed_controls: ClassVar[tuple[int, ...]] = ALL_CONTROLS

    def __init__(self) -> None:
        self._timers = TimerGroup(owner=self.name or type(self).__name__)
        self._ctx: Optional[ModeContext] = None

    # =================================================================
    # Lifecycle (called by the engine)
    # =================================================================

    def activate(self, ctx: ModeContext) -> None:
        self._timers.open(ctx.scheduler)
        self._ctx = ctx
        logger.debug(f"Activating mode '{self.name}' (trigger={ctx.triggering_control})")
        self.on_activate(ctx.triggering_control)

    def deactivate(self) -> None:
        """Stop all timers and release the LEDs. Safe to call when inactive."""
        self._timers.close()
        if self._ctx is None:
            return
        try:
            self.on_deactivate()
        finally:
            self._ctx = None
        logger.debug(f"Deactivated mode '{self.name}'")

    @property
    def is_active(self) -> bool:
        return self._ctx is not None

    # =================================================================
    # Hooks for subclasses
    # =================================================================

    def on_activate(self, trigger: Optional[int]) -> None:
        """Reset state and paint the initial LEDs."""

    def on_deactivate(self) -> None:
        """Release the grid. By default clears every claimed control."""
        self.clear_leds(self.claimed_controls)

    def handle_turn(self, control: int, value: int) -> bool:
        return False

    def handle_press(self, control: int) -> bool:
        return False

    def handle_release(self, control: int) -> bool:
        return False

    # =================================================================
    # Helpers
    # =================================================================

    @property
    def ctx(self) -> ModeContext:
        if self._ctx is None:
            raise RuntimeError(f"Mode '{self.name}' is not active")
        return self._ctx

    def set_led(self, control: int, value: float) -> None:
        if self._ctx is None:
            logger.debug(f"Mode '{self.name}' dropped LED write to {control} while inactive")
            return
        self._ctx.leds.set(control, value)

    def clear_leds(self, controls: Iterable[int] = ALL_CONTROLS) -> None:
        for control in controls:
            self.set_led(control, LED_OFF_VALUE)

    def call_later(self, delay_ms: float, callback: Callback) -> Optional[TimerHandle]:
        return self._timers.call_later(delay_ms, callback)

    def call_every(self, interval_ms: float, callback: Callback) -> Optional[TimerHandle]:
        return self._timers.call_every(interval_ms, callback)

    def cancel_timer(self, handle: Optional[TimerHandle]) -> None:
        self._timers.cancel(handle)

    def now(self) -> float:
        return self.ctx.scheduler.now()

    @property
    def timers(self) -> TimerGroup:
        return self._timers

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def __repr__(self) -> str:
        state = "active" if self.is_active else "inactive"
        return f"<{type(self).__name__} '{self.name}' {state}>"
