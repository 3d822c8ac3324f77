#!/usr/bin/env python3
# ABOUTME: Persistent user defaults for the DeepLX client (server URL and token).
# ABOUTME: Loads and saves the JSON config file and resolves effective settings.

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from deeplx_cli.errors import ConfigError

APP_NAME = "translate"
APP_VERSION = "0.1.0"

DEFAULT_URL = "http://localhost:1188"
DEFAULT_TIMEOUT = 30

URL_ENV_VARS = ("DEEPLX_URL",)
TOKEN_ENV_VARS = ("TOKEN", "DEEPLX_TOKEN")


@dataclass
class Config:
    """User defaults stored on disk."""

    default_url: str = ""
    default_token: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Config":
        """Build a config from parsed JSON, ignoring unknown or non-string values."""
        url = data.get("default_url")
        token = data.get("default_token")
        return cls(
            default_url=url if isinstance(url, str) else "",
            default_token=token if isinstance(token, str) else "",
        )

    def to_dict(self) -> Dict[str, str]:
        """Serialize to a dict, omitting empty fields."""
        data = {}
        if self.default_url:
            data["default_url"] = self.default_url
        if self.default_token:
            data["default_token"] = self.default_token
        return data

    def is_empty(self) -> bool:
        return not self.default_url and not self.default_token


class ConfigStore:
    """Reads and writes the config file at the per-user config location."""

    CONFIG_SUBDIR = "translate"
    CONFIG_FILENAME = "config.json"

    @staticmethod
    def get_user_config_dir() -> Path:
        """Return the platform's per-user configuration directory.

        Linux and other Unix: $XDG_CONFIG_HOME, falling back to ~/.config
        macOS: ~/Library/Application Support
        Windows: %APPDATA%
        """
        if sys.platform == "win32":
            appdata = os.environ.get("APPDATA")
            if not appdata:
                raise ConfigError("%APPDATA% is not defined")
            return Path(appdata)

        if sys.platform != "darwin":
            xdg = os.environ.get("XDG_CONFIG_HOME")
            if xdg and os.path.isabs(xdg):
                return Path(xdg)

        try:
            home = Path.home()
        except RuntimeError as e:
            raise ConfigError(f"cannot determine home directory: {e}") from e

        if sys.platform == "darwin":
            return home / "Library" / "Application Support"
        return home / ".config"

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the full path of the config file."""
        return cls.get_user_config_dir() / cls.CONFIG_SUBDIR / cls.CONFIG_FILENAME

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Config:
        """Load the config file.

        Any failure (no config dir, missing file, unreadable file, malformed
        JSON) yields an empty Config instead of an error.

        Args:
            path: Optional explicit config file path

        Returns:
            The loaded configuration
        """
        try:
            config_path = Path(path) if path else cls.get_config_path()
            with open(config_path, "r", encoding="utf-8") as file:
                data = json.load(file)
        except (ConfigError, OSError, ValueError):
            return Config()

        if not isinstance(data, dict):
            return Config()
        return Config.from_dict(data)

    @classmethod
    def save(cls, config: Config, path: Optional[Path] = None) -> Path:
        """Write the config file, replacing whatever was there.

        Args:
            config: Configuration to persist
            path: Optional explicit config file path

        Returns:
            The path the config was written to

        Raises:
            ConfigError: If the directory or file cannot be written
        """
        config_path = Path(path) if path else cls.get_config_path()
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as file:
                file.write(json.dumps(config.to_dict(), indent=2))
        except OSError as e:
            raise ConfigError(f"failed to save config to {config_path}: {e}") from e
        return config_path


def _first_env(names: Tuple[str, ...], environ: Mapping[str, str]) -> str:
    for name in names:
        value = environ.get(name)
        if value:
            return value
    return ""


def resolve_settings(
    config: Config,
    url: Optional[str] = None,
    token: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Tuple[str, str]:
    """Work out the effective server URL and token.

    Priority: explicit flag, then environment variable, then the persisted
    config, then the built-in default.

    Args:
        config: Loaded configuration
        url: URL given on the command line, if any
        token: Token given on the command line, if any
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Tuple of (server_url, token)
    """
    if environ is None:
        environ = os.environ

    resolved_url = (
        url
        or _first_env(URL_ENV_VARS, environ)
        or config.default_url
        or DEFAULT_URL
    )
    resolved_token = (
        token
        or _first_env(TOKEN_ENV_VARS, environ)
        or config.default_token
        or ""
    )
    return resolved_url, resolved_token
