"""
Top-level application wiring.

FidgetApp owns the three long-lived pieces and connects them:

    TwisterController (MIDI threads)
        └── on_message ──post──> LoopScheduler (single loop thread)
                                    └── ModeEngine ──> LedBus ──> TwisterOutput

MIDI callbacks never touch modes directly; every decoded message is posted
onto the loop so events and timers run one at a time.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

import mido

from twisterfidget.core import LedBus, LoopScheduler, ModeEngine, ModeEvent
from twisterfidget.devices import TwisterController, TwisterInput
from twisterfidget.exceptions import ErrorContext, handle_errors
from twisterfidget.models import AppConfig
from twisterfidget.modes import Mode, build_default_modes
from twisterfidget.services import SlackPhotoUploader

logger = logging.getLogger(__name__)


class ModeLogObserver:
    """Writes mode lifecycle notifications to the log."""

    def on_mode_event(self, event: ModeEvent, mode_name: str) -> None:
        if event == ModeEvent.LONG_PRESS_RESET:
            logger.info(f"Long press in '{mode_name}', returning to mode select")
        else:
            logger.debug(f"Mode '{mode_name}' {event.value}")


class FidgetApp:
    """
    Runs the engine against a real Twister.

    Usage:
        app = FidgetApp(AppConfig.load_or_default())
        app.run()  # blocks until Ctrl+C
    """

    def __init__(
        self,
        config: AppConfig,
        modes: Optional[Iterable[Mode]] = None,
        scheduler: Optional[LoopScheduler] = None,
        controller: Optional[TwisterController] = None,
    ):
        self.config = config
        self.scheduler = scheduler or LoopScheduler()
        self.controller = controller or TwisterController(
            device_name=config.device_name,
            led_channel=config.led_channel,
            poll_interval=config.midi_poll_interval,
        )

        self._executor: Optional[ThreadPoolExecutor] = None
        if modes is None:
            modes = self._build_modes()

        self.leds = LedBus(self.controller.output)
        self.engine = ModeEngine(
            leds=self.leds,
            scheduler=self.scheduler,
            modes=modes,
            long_press_ms=config.long_press_ms,
            decoder=TwisterInput(
                knob_channel=config.knob_channel,
                button_channel=config.button_channel,
            ),
        )
        self.engine.register_observer(ModeLogObserver())
        self.controller.on_message(self._on_midi)

        self._stopped = threading.Event()
        self._started = False

    @handle_errors(operation_name="set up photo upload", re_raise=False, fallback_value=None)
    def _build_uploader(self) -> Optional[SlackPhotoUploader]:
        if not self.config.photo.is_configured:
            logger.info("No Slack token configured, photo mode disabled")
            return None
        return SlackPhotoUploader.from_config(self.config.photo)

    def _build_modes(self) -> list[Mode]:
        uploader = self._build_uploader()
        if uploader is not None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="photo-upload")
        return build_default_modes(uploader=uploader, executor=self._executor)

    def _on_midi(self, msg: mido.Message) -> None:
        # Called on a MIDI thread
        self.scheduler.post(lambda: self.engine.handle_midi(msg))

    # =================================================================
    # Lifecycle
    # =================================================================

    def start(self) -> None:
        """
        Start the loop and the MIDI connection, then activate the start mode.

        Raises:
            UnknownModeError: If the configured start mode is not registered
        """
        if self._started:
            return
        self.engine.require_mode(self.config.start_mode)

        self._stopped.clear()
        self.scheduler.start()
        self.controller.start()
        self.scheduler.post(lambda: self.engine.switch_to(self.config.start_mode))
        self._started = True
        logger.info(f"FidgetApp started in '{self.config.start_mode}'")

    def run(self) -> None:
        """Start and block until `stop()` is called or Ctrl+C."""
        self.start()
        try:
            while not self._stopped.wait(0.5):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self.stop()

    def stop(self) -> None:
        if not self._started:
            self._stopped.set()
            return
        self._started = False

        done = threading.Event()

        def shutdown_engine() -> None:
            try:
                self.engine.shutdown()
            finally:
                done.set()

        self.scheduler.post(shutdown_engine)
        if not done.wait(timeout=2.0):
            logger.warning("Engine did not shut down in time")

        with ErrorContext("stop MIDI controller", logger, re_raise=False):
            self.controller.stop()
        self.scheduler.stop()
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
        self._stopped.set()
        logger.info("FidgetApp stopped")
