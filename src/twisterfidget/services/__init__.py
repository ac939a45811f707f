"""External side-effect services (not tied to a specific mode)."""

from twisterfidget.services.photo_upload import SLACK_SET_PHOTO_URL, SlackPhotoUploader

__all__ = [
    "SLACK_SET_PHOTO_URL",
    "SlackPhotoUploader",
]
