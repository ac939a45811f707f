"""Mode engine: owns the active mode and routes every input event to it."""

import logging
from typing import TYPE_CHECKING, Iterable, Optional

import mido

from twisterfidget.core.events import InputEvent, PressEvent, ReleaseEvent, TurnEvent
from twisterfidget.core.leds import LedBus
from twisterfidget.core.observer import ModeEvent, ModeObserver, ObserverManager
from twisterfidget.core.scheduler import Scheduler, TimerHandle
from twisterfidget.devices.twister import TwisterInput
from twisterfidget.exceptions import UnknownModeError

if TYPE_CHECKING:
    from twisterfidget.modes.base import Mode

logger = logging.getLogger(__name__)

DEFAULT_LONG_PRESS_MS = 1500
MODE_SELECT = "mode_select"


class ModeEngine:
    """
    Holds the single active mode and drives its lifecycle.

    Dispatch order for every event:
        1. No active mode, or a switch in progress: drop the event.
        2. Route to the active mode's handler. Handler exceptions are
           logged and the event counts as not handled.
        3. A press (re)arms the long-press watchdog for that control; a
           release or a press on another control disarms it.
        4. When the watchdog fires, switch to the mode-select mode,
           whatever the active mode did with the press.

    All methods must be called from the scheduling thread.
    """

    def __init__(
        self,
        leds: LedBus,
        scheduler: Scheduler,
        modes: Optional[Iterable["Mode"]] = None,
        select_mode_name: str = MODE_SELECT,
        long_press_ms: float = DEFAULT_LONG_PRESS_MS,
        decoder: Optional[TwisterInput] = None,
    ):
        if long_press_ms <= 0:
            raise ValueError(f"long_press_ms must be positive, got {long_press_ms}")

        self.leds = leds
        self.scheduler = scheduler
        self.select_mode_name = select_mode_name
        self.long_press_ms = long_press_ms
        self.decoder = decoder or TwisterInput(num_controls=leds.num_controls)

        self._modes: dict[str, "Mode"] = {}
        self._active: Optional["Mode"] = None
        self._switching = False

        self._watchdog: Optional[TimerHandle] = None
        self._watchdog_control: Optional[int] = None

        self._observers = ObserverManager[ModeObserver](observer_type_name="mode")

        for mode in modes or ():
            self.register(mode)

    # =================================================================
    # Registry
    # =================================================================

    def register(self, mode: "Mode") -> None:
        if not mode.name:
            raise ValueError(f"{type(mode).__name__} has no registry name")
        if mode.name in self._modes:
            logger.warning(f"Replacing registered mode '{mode.name}'")
        self._modes[mode.name] = mode

    @property
    def modes(self) -> dict[str, "Mode"]:
        return dict(self._modes)

    def require_mode(self, name: str) -> "Mode":
        """Strict lookup for callers outside the event path."""
        try:
            return self._modes[name]
        except KeyError:
            raise UnknownModeError(name, list(self._modes)) from None

    @property
    def active_mode(self) -> Optional["Mode"]:
        return self._active

    @property
    def active_mode_name(self) -> Optional[str]:
        return self._active.name if self._active else None

    # =================================================================
    # Observers
    # =================================================================

    def register_observer(self, observer: ModeObserver) -> None:
        self._observers.register(observer)

    def unregister_observer(self, observer: ModeObserver) -> None:
        self._observers.unregister(observer)

    # =================================================================
    # Input
    # =================================================================

    def handle_message(self, status: int, control: int, value: int) -> bool:
        """Decode a raw control-change tuple and dispatch it."""
        event = self.decoder.parse(status, control, value)
        if event is None:
            return False
        return self.dispatch(event)

    def handle_midi(self, msg: mido.Message) -> bool:
        event = self.decoder.parse_message(msg)
        if event is None:
            return False
        return self.dispatch(event)

    def dispatch(self, event: InputEvent) -> bool:
        """
        Deliver one event to the active mode.

        Returns:
            True if the mode consumed the event
        """
        mode = self._active
        if mode is None:
            logger.debug(f"No active mode, dropping {event}")
            return False
        if self._switching:
            logger.debug(f"Switch in progress, dropping {event}")
            return False

        handled = self._route(mode, event)

        if isinstance(event, PressEvent):
            self._arm_watchdog(event.control)
        elif isinstance(event, ReleaseEvent):
            self._disarm_watchdog()

        return handled

    def _route(self, mode: "Mode", event: InputEvent) -> bool:
        try:
            if isinstance(event, TurnEvent):
                return bool(mode.handle_turn(event.control, event.value))
            if isinstance(event, PressEvent):
                return bool(mode.handle_press(event.control))
            if isinstance(event, ReleaseEvent):
                return bool(mode.handle_release(event.control))
        except Exception as e:
            logger.error(f"Mode '{mode.name}' failed handling {event}: {e}", exc_info=True)
            return False

        logger.warning(f"Unsupported event type {type(event).__name__}")
        return False

    # =================================================================
    # Long-press watchdog
    # =================================================================

    def _arm_watchdog(self, control: int) -> None:
        self._disarm_watchdog()
        self._watchdog_control = control
        handle: Optional[TimerHandle] = None

        def fire() -> None:
            if self._watchdog is not handle:
                return
            self._watchdog = None
            self._watchdog_control = None
            logger.info(f"Long press on control {control}, returning to '{self.select_mode_name}'")
            self._observers.notify("on_mode_event", ModeEvent.LONG_PRESS_RESET, self.select_mode_name)
            self.switch_to(self.select_mode_name)

        handle = self.scheduler.call_later(self.long_press_ms, fire)
        self._watchdog = handle

    def _disarm_watchdog(self) -> None:
        if self._watchdog is not None:
            self._watchdog.cancel()
        self._watchdog = None
        self._watchdog_control = None

    @property
    def watchdog_armed(self) -> bool:
        return self._watchdog is not None

    # =================================================================
    # Switching
    # =================================================================

    def switch_to(self, name: str, triggering_control: Optional[int] = None) -> bool:
        """
        Deactivate the current mode and activate `name`.

        Unknown names are logged and leave the current mode running.

        Returns:
            True if the switch happened
        """
        target = self._modes.get(name)
        if target is None:
            logger.error(f"Unknown mode '{name}', staying on '{self.active_mode_name}'")
            return False
        if self._switching:
            logger.warning(f"Switch to '{name}' requested during another switch, ignoring")
            return False

        # Imported here to avoid a cycle; modes depend on the core package
        from twisterfidget.modes.base import ModeContext

        self._switching = True
        try:
            previous = self._active
            if previous is not None:
                self._deactivate(previous)

            self._active = target
            ctx = ModeContext(
                leds=self.leds,
                scheduler=self.scheduler,
                switch_to=self.switch_to,
                triggering_control=triggering_control,
                available_modes=frozenset(self._modes),
            )
            try:
                target.activate(ctx)
            except Exception as e:
                logger.error(f"Mode '{name}' failed to activate: {e}", exc_info=True)
        finally:
            self._switching = False

        logger.info(f"Switched to mode '{name}'")
        self._observers.notify("on_mode_event", ModeEvent.ACTIVATED, name)
        return True

    def _deactivate(self, mode: "Mode") -> None:
        try:
            mode.deactivate()
        except Exception as e:
            logger.error(f"Mode '{mode.name}' failed to deactivate: {e}", exc_info=True)

        if mode.pending_timers:
            logger.error(f"Mode '{mode.name}' left {mode.pending_timers} timer(s) pending, cancelling")
            mode.timers.cancel_all()

        self._observers.notify("on_mode_event", ModeEvent.DEACTIVATED, mode.name)

    def shutdown(self) -> None:
        """Deactivate the active mode and disarm the watchdog."""
        self._disarm_watchdog()
        if self._active is not None:
            self._deactivate(self._active)
            self._active = None
        logger.debug("ModeEngine shut down")
