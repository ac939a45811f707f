"""Application configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field, field_serializer

from twisterfidget.constants import BUTTON_CHANNEL, KNOB_CHANNEL, LED_CHANNEL
from twisterfidget.utils.persistence import PydanticPersistence

DEFAULT_CONFIG_DIR = Path.home() / ".twisterfidget"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.json"


class PhotoConfig(BaseModel):
    """Profile photo upload configuration."""

    token: str | None = Field(
        default=None,
        description="Slack user token with users.profile:write scope",
    )
    image_dir: Path = Field(
        default_factory=lambda: DEFAULT_CONFIG_DIR / "photos",
        description="Directory holding <knob>.png images",
    )
    api_url: str = Field(
        default="https://slack.com/api/users.setPhoto",
        description="Endpoint receiving the multipart image upload",
    )
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout (seconds)")

    @field_serializer("image_dir")
    def serialize_path(self, path: Path) -> str:
        """Serialize Path to string."""
        return str(path)

    @property
    def is_configured(self) -> bool:
        """Check if an upload token is available."""
        return bool(self.token)


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # Device
    device_name: str = Field(
        default="Midi Fighter Twister",
        description="Substring matched (case-insensitive) against MIDI port names",
    )
    knob_channel: int = Field(default=KNOB_CHANNEL, ge=0, le=15, description="0-based channel carrying turns")
    button_channel: int = Field(
        default=BUTTON_CHANNEL, ge=0, le=15, description="0-based channel carrying press/release"
    )
    led_channel: int = Field(default=LED_CHANNEL, ge=0, le=15, description="0-based channel for LED writes")

    # Engine
    long_press_ms: int = Field(default=1500, gt=0, description="Hold duration that returns to mode select")
    start_mode: str = Field(default="mode_select", description="Mode activated at startup")

    # MIDI settings
    midi_poll_interval: float = Field(
        default=2.0, gt=0, description="How often to check for MIDI device changes (seconds)"
    )

    # Photo upload
    photo: PhotoConfig = Field(
        default_factory=PhotoConfig,
        description="Profile photo upload configuration",
    )

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses default location
                  (~/.twisterfidget/config.json).

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        if path is None:
            path = DEFAULT_CONFIG_PATH
        return PydanticPersistence.load_json_or_default(path, cls)

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        if path is None:
            path = DEFAULT_CONFIG_PATH
        PydanticPersistence.save_json(self, path)
