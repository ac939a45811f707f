"""Photo mode: pressing knob N applies image N as the profile photo."""

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Optional, Protocol

from twisterfidget.constants import LedColor
from twisterfidget.exceptions import PhotoNotFoundError, PhotoRejectedError

from .base import Mode

logger = logging.getLogger(__name__)


class PhotoUploader(Protocol):
    """Anything that can apply image N for control N (blocking)."""

    def upload(self, control: int) -> None: ...


def result_color(error: Optional[BaseException]) -> LedColor:
    """LED color reporting the outcome of one upload."""
    if error is None:
        return LedColor.GREEN
    if isinstance(error, PhotoNotFoundError):
        return LedColor.YELLOW
    if isinstance(error, PhotoRejectedError):
        return LedColor.PINK
    return LedColor.RED


class PhotoMode(Mode):
    """
    Uploads run on ``executor``; the outcome is posted back to the engine's
    scheduler and shown on the pressed knob. Every activation starts a new
    session, and results belonging to an older session are discarded, so a
    slow upload never writes LEDs into the next mode.
    """

    name = "photo"
    description = "Press a knob to set the matching profile photo"

    def __init__(self, uploader: Optional[PhotoUploader] = None, executor: Optional[Executor] = None):
        super().__init__()
        self.uploader = uploader
        self._executor = executor
        self._owns_executor = False
        self._session = 0
        self.in_flight: set[int] = set()

    @property
    def session(self) -> int:
        return self._session

    def on_activate(self, trigger: Optional[int]) -> None:
        self._session += 1
        self.in_flight = set()
        self.clear_leds()
        if self.uploader is None:
            logger.warning("Photo mode active without an uploader; set a Slack token to enable it")

    def on_deactivate(self) -> None:
        self._session += 1
        if self.in_flight:
            logger.info(f"Discarding {len(self.in_flight)} pending upload result(s)")
        self.in_flight = set()
        super().on_deactivate()

    def handle_turn(self, control: int, value: int) -> bool:
        return True

    def handle_press(self, control: int) -> bool:
        if self.uploader is None:
            logger.warning(f"No uploader configured, ignoring press on {control}")
            self.set_led(control, LedColor.RED)
            return True
        if control in self.in_flight:
            logger.debug(f"Upload for {control} already running")
            return True

        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="photo-upload")
            self._owns_executor = True

        session = self._session
        scheduler = self.ctx.scheduler
        self.in_flight.add(control)
        logger.info(f"Uploading photo {control}")

        future = self._executor.submit(self.uploader.upload, control)
        future.add_done_callback(
            lambda f: scheduler.post(lambda: self._on_upload_done(session, control, f))
        )
        return True

    def _on_upload_done(self, session: int, control: int, future: Future) -> None:
        if session != self._session or not self.is_active:
            logger.debug(f"Dropping stale upload result for {control}")
            return
        self.in_flight.discard(control)

        error = future.exception()
        if error is None:
            logger.info(f"Photo {control} applied")
        else:
            logger.error(f"Photo {control} failed: {error}")
        self.set_led(control, result_color(error))

    def shutdown(self) -> None:
        """Stop the worker pool if this mode created one."""
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
