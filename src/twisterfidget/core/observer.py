"""Mode lifecycle events and the observer list that broadcasts them.

The engine reports every activation, deactivation and long-press reset
through an ObserverManager. The CLI uses this to log mode changes; tests use
it to check the order of lifecycle calls.
"""

import logging
from enum import Enum
from threading import Lock
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class ModeEvent(Enum):
    """Mode lifecycle events emitted by the engine."""

    ACTIVATED = "activated"                # Mode became the active mode
    DEACTIVATED = "deactivated"            # Mode stopped and released its LEDs
    LONG_PRESS_RESET = "long_press_reset"  # Watchdog fired and forced mode select


@runtime_checkable
class ModeObserver(Protocol):
    """Protocol for objects that want to hear about mode changes."""

    def on_mode_event(self, event: ModeEvent, mode_name: str) -> None:
        """
        Handle a mode lifecycle event.

        Args:
            event: The lifecycle event
            mode_name: Registry name of the mode involved

        Threading:
            Called on the scheduling thread, between input events.
            Implementations must not block.
        """
        ...


class ObserverManager[T: object]:
    """
    Thread-safe observer list.

    The lock is only held while copying the list, never while calling the
    observers, so an observer may register or unregister from its callback.
    """

    def __init__(self, lock: "Lock | None" = None, observer_type_name: str = "observer"):
        self._observers: list[T] = []
        self._lock = lock or Lock()
        self._observer_type_name = observer_type_name

    def register(self, observer: T) -> None:
        """Register an observer (idempotent)."""
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)
                logger.debug(f"Registered {self._observer_type_name} observer: {observer}")

    def unregister(self, observer: T) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)
                logger.debug(f"Unregistered {self._observer_type_name} observer: {observer}")
            else:
                logger.warning(
                    f"Attempted to unregister unknown {self._observer_type_name} observer: {observer}"
                )

    def notify(self, callback_name: str, *args: Any, **kwargs: Any) -> None:
        """
        Call `callback_name` on every observer.

        Exceptions raised by one observer are logged and do not stop the
        others from being notified.
        """
        with self._lock:
            observers = list(self._observers)

        for observer in observers:
            try:
                callback = getattr(observer, callback_name)
                callback(*args, **kwargs)
            except AttributeError:
                logger.error(
                    f"{self._observer_type_name} observer {observer} has no method '{callback_name}'",
                    exc_info=True,
                )
            except Exception as e:
                logger.error(
                    f"Error notifying {self._observer_type_name} observer {observer} via {callback_name}: {e}",
                    exc_info=True,
                )

    def clear(self) -> None:
        with self._lock:
            self._observers.clear()

    def __contains__(self, observer: T) -> bool:
        with self._lock:
            return observer in self._observers

    def __len__(self) -> int:
        with self._lock:
            return len(self._observers)
