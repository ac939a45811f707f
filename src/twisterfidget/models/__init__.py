"""Configuration models."""

from .config import DEFAULT_CONFIG_PATH, AppConfig, PhotoConfig

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AppConfig",
    "PhotoConfig",
]
