"""Configuration management for the Kandinsky client."""

from kandinsky.core.config.loader import detect_format, load_config, load_settings
from kandinsky.core.config.models import DEFAULT_BASE_URL, KandinskySettings, LoggingConfig

__all__ = [
    "DEFAULT_BASE_URL",
    "KandinskySettings",
    "LoggingConfig",
    "detect_format",
    "load_config",
    "load_settings",
]
