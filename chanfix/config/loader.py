"""Configuration file discovery and loading."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .model import BotConfig

CONFIG_FILE_ENV = "CHANFIX_CONF_FILE"
CONFIG_DIR_ENV = "CHANFIX_CONFIG_DIR"


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


def config_dir() -> Path:
    """Directory holding config.json and, by default, the enrollment file."""
    explicit = os.environ.get(CONFIG_DIR_ENV)
    if explicit:
        return Path(explicit).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg).expanduser() / "chanfix"
    return Path.home() / ".config" / "chanfix"


def config_path() -> Path:
    explicit = os.environ.get(CONFIG_FILE_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return config_dir() / "config.json"


def default_enrollment_path() -> Path:
    return config_dir() / "enrollments.json"


def write_template(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(BotConfig.template(), f, indent=2)
        f.write("\n")


class ConfigLoader:
    """Reads and validates the bot configuration."""

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self.path = Path(path) if path is not None else config_path()

    def read_raw(self) -> dict[str, Any]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise
        except (OSError, ValueError) as e:
            raise ConfigError(f"cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{self.path} must contain a JSON object")
        return data

    def load(self) -> BotConfig:
        """Load the configuration file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigError: If it cannot be parsed or fails validation.
        """
        data = self.read_raw()
        try:
            config = BotConfig.from_dict(data)
        except ValidationError as e:
            raise ConfigError(f"invalid configuration in {self.path}: {e}") from e
        if not config.enrollment_file:
            config = config.model_copy(
                update={"enrollment_file": str(default_enrollment_path())}
            )
        return config

    def get_configuration(self) -> BotConfig:
        """Load the configuration or exit the process.

        A missing file is replaced by a template and the user is asked to
        edit it.

        Raises:
            SystemExit: If no usable configuration exists.
        """
        try:
            config = self.load()
        except FileNotFoundError:
            try:
                write_template(self.path)
            except OSError as e:
                logging.error(f"💥 Could not write config template path={self.path}: {e}")
                sys.exit(1)
            logging.error(f"📁 No configuration file found; template written to {self.path}")
            logging.error("📝 Edit the template (server, oper credentials) and start again")
            sys.exit(1)
        except ConfigError as e:
            logging.error(f"⚠️ {e}")
            sys.exit(1)
        logging.info(
            f"✅ Configuration loaded server={config.server}:{config.port} nick={config.nick}"
        )
        return config
