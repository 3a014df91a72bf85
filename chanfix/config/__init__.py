"""Configuration loading for the ChanFix service."""

from .loader import (
    ConfigError,
    ConfigLoader,
    config_dir,
    config_path,
    default_enrollment_path,
    write_template,
)
from .model import BotConfig

__all__ = [
    "BotConfig",
    "ConfigError",
    "ConfigLoader",
    "config_dir",
    "config_path",
    "default_enrollment_path",
    "write_template",
]
