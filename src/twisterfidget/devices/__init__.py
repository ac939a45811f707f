"""Device adapters."""

from .twister import DEFAULT_DEVICE_NAME, TwisterController, TwisterInput, TwisterOutput

__all__ = ["DEFAULT_DEVICE_NAME", "TwisterController", "TwisterInput", "TwisterOutput"]
