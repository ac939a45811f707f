"""Hot-plug port management shared by the MIDI input and output sides."""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional, TypeVar

import mido

logger = logging.getLogger(__name__)

PortType = TypeVar("PortType", bound=mido.ports.BaseIOPort)

ConnectionCallback = Callable[[bool, Optional[str]], None]


class BaseMidiManager(ABC, Generic[PortType]):
    """
    Keeps one MIDI port open for whichever device matches `device_filter`.

    A daemon thread polls the port list every `poll_interval` seconds,
    opening the first matching port and closing it again when the device
    disappears. The controller can therefore be plugged in after startup
    or replugged while the program runs.
    """

    port_kind: str = "port"
    change_log_level: int = logging.INFO

    def __init__(
        self,
        device_filter: Callable[[str], bool],
        poll_interval: float = 2.0,
        port_selector: Optional[Callable[[list[str]], Optional[str]]] = None,
    ):
        self._device_filter = device_filter
        self._poll_interval = poll_interval
        self._port_selector = port_selector
        self._running = False
        self._monitor_thread: Optional[threading.Thread] = None
        self._port: Optional[PortType] = None
        self._port_lock = threading.Lock()
        self._no_device_warned = False
        self._on_connection_changed: Optional[ConnectionCallback] = None

    @abstractmethod
    def _get_available_ports(self) -> list[str]:
        """Names of the ports of this kind currently present."""

    @abstractmethod
    def _open_port(self, port_name: str) -> PortType:
        """Open a port; may raise if the device refuses."""

    # =================================================================
    # Lifecycle
    # =================================================================

    def start(self) -> None:
        if self._running:
            logger.warning(f"MIDI {self.port_kind} manager is already running")
            return

        self._running = True
        self._monitor_thread = threading.Thread(
            target=self._monitor_devices, name=f"midi-{self.port_kind}-monitor", daemon=True
        )
        self._monitor_thread.start()
        logger.debug(f"MIDI {self.port_kind} manager started")

    def stop(self) -> None:
        self._running = False

        with self._port_lock:
            self._close_port()

        if self._monitor_thread and self._monitor_thread.is_alive():
            self._monitor_thread.join(timeout=1.0)
        self._monitor_thread = None

        logger.debug(f"MIDI {self.port_kind} manager stopped")

    def on_connection_changed(self, callback: ConnectionCallback) -> None:
        """Register callback receiving (is_connected, port_name)."""
        self._on_connection_changed = callback

    # =================================================================
    # Port discovery
    # =================================================================

    def _find_matching_port(self) -> Optional[str]:
        matching = [p for p in self._get_available_ports() if self._device_filter(p)]
        if not matching:
            return None
        if self._port_selector:
            return self._port_selector(matching)
        return matching[0]

    def _monitor_devices(self) -> None:
        logger.debug(f"Watching for MIDI {self.port_kind} devices")
        known_ports: set[str] = set()

        while self._running:
            try:
                available = set(self._get_available_ports())
                for port in sorted(available - known_ports):
                    logger.log(self.change_log_level, f"MIDI {self.port_kind} port appeared: {port}")
                for port in sorted(known_ports - available):
                    logger.log(self.change_log_level, f"MIDI {self.port_kind} port vanished: {port}")
                known_ports = available

                with self._port_lock:
                    self._refresh_connection(available)
            except Exception as e:
                logger.error(f"Error while polling MIDI {self.port_kind} ports: {e}")

            time.sleep(self._poll_interval)

    def _refresh_connection(self, available: set[str]) -> None:
        """Drop a vanished port and pick up a matching one. Caller holds the port lock."""
        if self._port and self._port.name not in available:
            logger.warning(f"MIDI {self.port_kind} disconnected: {self._port.name}")
            self._close_port()
            self._no_device_warned = False
            self._fire_connection_changed(False, None)

        if self._port:
            return

        port_name = self._find_matching_port()
        if port_name is None:
            if not self._no_device_warned:
                logger.warning(f"No matching MIDI {self.port_kind} device found")
                self._no_device_warned = True
            return

        try:
            self._port = self._open_port(port_name)
        except Exception as e:
            logger.error(f"Failed to open MIDI {self.port_kind} '{port_name}': {e}")
            self._port = None
            return

        logger.info(f"Connected to MIDI {self.port_kind}: {port_name}")
        self._fire_connection_changed(True, port_name)

    def _close_port(self) -> None:
        if self._port is None:
            return
        try:
            self._port.close()
        except Exception as e:
            logger.error(f"Error closing MIDI {self.port_kind} port: {e}")
        self._port = None

    def _fire_connection_changed(self, connected: bool, port_name: Optional[str]) -> None:
        callback = self._on_connection_changed
        if callback is None:
            return

        # Run outside the port lock so the callback may query this manager
        def fire() -> None:
            try:
                callback(connected, port_name)
            except Exception as e:
                logger.error(f"Error in MIDI connection callback: {e}")

        threading.Thread(target=fire, daemon=True).start()

    # =================================================================
    # State
    # =================================================================

    @property
    def is_connected(self) -> bool:
        with self._port_lock:
            return self._port is not None

    @property
    def current_port(self) -> Optional[str]:
        with self._port_lock:
            return self._port.name if self._port else None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
