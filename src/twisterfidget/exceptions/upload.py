"""Photo upload exceptions.

These are raised by the photo uploader service and translated into LED
colors by the photo mode, so a failed upload never stops the engine.
"""

from typing import Optional

from .base import TwisterFidgetError


class PhotoUploadError(TwisterFidgetError):
    """Uploading a profile photo failed."""

    def __init__(self, control: int, reason: str, recovery_hint: Optional[str] = None):
        super().__init__(
            user_message=f"Could not upload photo for knob {control}",
            technical_message=f"Photo upload for knob {control} failed: {reason}",
            recoverable=True,
            recovery_hint=recovery_hint,
        )
        self.control = control
        self.reason = reason


class PhotoNotFoundError(PhotoUploadError):
    """There is no image file for the pressed knob."""

    def __init__(self, control: int, path: str):
        super().__init__(
            control,
            f"image file does not exist: {path}",
            recovery_hint=f"Add an image named {control}.png to the photo image directory",
        )
        self.path = path


class PhotoRejectedError(PhotoUploadError):
    """The remote API answered but refused the upload."""

    def __init__(self, control: int, reason: str):
        super().__init__(
            control,
            f"upload rejected: {reason}",
            recovery_hint="Check that the token is valid and has the users.profile:write scope",
        )
