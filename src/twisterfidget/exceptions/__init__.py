"""
Custom exception hierarchy for twisterfidget.

```
TwisterFidgetError (base)
├── ConfigurationError
│   ├── ConfigFileInvalidError
│   └── ConfigValidationError
├── DeviceError
│   └── DeviceNotFoundError
├── ModeError
│   └── UnknownModeError
└── PhotoUploadError
    ├── PhotoNotFoundError
    └── PhotoRejectedError
```

Every exception carries a `user_message` for display, a `technical_message`
for logs and an optional `recovery_hint`. See `twisterfidget.exceptions.handlers`
for the decorator and context manager that log them consistently.
"""

from .base import TwisterFidgetError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .device import DeviceError, DeviceNotFoundError
from .handlers import (
    ErrorContext,
    format_error_for_display,
    handle_errors,
    wrap_pydantic_error,
)
from .modes import ModeError, UnknownModeError
from .upload import PhotoNotFoundError, PhotoRejectedError, PhotoUploadError

__all__ = [
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    # Device
    "DeviceError",
    "DeviceNotFoundError",
    # Handlers
    "ErrorContext",
    # Modes
    "ModeError",
    # Upload
    "PhotoNotFoundError",
    "PhotoRejectedError",
    "PhotoUploadError",
    # Base
    "TwisterFidgetError",
    "UnknownModeError",
    "format_error_for_display",
    "handle_errors",
    "wrap_pydantic_error",
]
