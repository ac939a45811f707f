"""Profile photo upload service.

Uploads ``<image_dir>/<knob>.png`` as the user's Slack profile photo. The
call blocks on network I/O, so the photo mode runs it on a worker thread
and only touches LEDs once the result is back on the engine loop.
"""

import logging
from pathlib import Path

import requests

from twisterfidget.exceptions import PhotoNotFoundError, PhotoRejectedError, PhotoUploadError
from twisterfidget.models import PhotoConfig

logger = logging.getLogger(__name__)

SLACK_SET_PHOTO_URL = "https://slack.com/api/users.setPhoto"


class SlackPhotoUploader:
    """
    Apply image N to control N by uploading it as a profile photo.

    Usage:
        uploader = SlackPhotoUploader.from_config(config.photo)
        uploader.upload(3)  # uploads <image_dir>/3.png

    ``upload`` returns normally on success and raises a ``PhotoUploadError``
    subclass otherwise:

    - ``PhotoNotFoundError``: no image for that control
    - ``PhotoRejectedError``: the API answered with an HTTP error or ``"ok": false``
    - ``PhotoUploadError``: network or file errors
    """

    def __init__(
        self,
        token: str,
        image_dir: Path,
        api_url: str = SLACK_SET_PHOTO_URL,
        timeout: float = 30.0,
    ):
        if not token:
            raise ValueError("A Slack token is required to upload photos")
        self._token = token
        self.image_dir = Path(image_dir)
        self.api_url = api_url
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: PhotoConfig) -> "SlackPhotoUploader":
        """Build an uploader from the photo section of the app config."""
        if not config.token:
            raise ValueError("Photo upload is not configured (no token)")
        return cls(
            token=config.token,
            image_dir=config.image_dir.expanduser(),
            api_url=config.api_url,
            timeout=config.timeout,
        )

    def image_path(self, control: int) -> Path:
        return self.image_dir / f"{control}.png"

    def upload(self, control: int) -> None:
        """Upload the image for ``control``. Blocks until the API answers."""
        path = self.image_path(control)
        if not path.is_file():
            logger.error(f"No image for control {control}: {path}")
            raise PhotoNotFoundError(control, str(path))

        logger.info(f"Uploading {path} as profile photo")
        try:
            with path.open("rb") as fh:
                res = requests.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self._token}"},
                    files={"image": (path.name, fh, "image/png")},
                    timeout=self.timeout,
                )
        except requests.exceptions.Timeout as e:
            raise PhotoUploadError(
                control,
                f"request timed out after {self.timeout}s",
                recovery_hint="Check your network connection or raise photo.timeout",
            ) from e
        except requests.RequestException as e:
            raise PhotoUploadError(control, f"request failed: {e}") from e
        except OSError as e:
            raise PhotoUploadError(control, f"could not read {path}: {e}") from e

        if not res.ok:
            raise PhotoRejectedError(control, f"HTTP {res.status_code} {res.reason}")

        try:
            body = res.json()
        except ValueError as e:
            raise PhotoRejectedError(control, "response is not JSON") from e

        if not body.get("ok", False):
            raise PhotoRejectedError(control, body.get("error", "unknown error"))

        logger.info(f"Profile photo set from image {control}")
