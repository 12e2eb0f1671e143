"""Server configuration.

Sources, lowest to highest precedence:
    - built-in defaults (the identity a bare ``McpServerHost()`` advertises)
    - a TOML or JSON file, flat or under a ``[server]`` table
    - ``MCPHOST_*`` environment variables

``load_config`` never raises for a bad file. It falls back to defaults and
records the problem in ``ConfigLoadResult.error`` (safe mode):

    config, meta = load_config()
    if meta.error:
        logger.warning("Using defaults: %s", meta.error)
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mcphost.core.result import ConfigurationError

ENV_PREFIX = "MCPHOST_"
CONFIG_ENV_VAR = f"{ENV_PREFIX}CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.mcphost.toml")
SERVER_TABLE = "server"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ConfigurationError):
    """Raised when a config file cannot be parsed."""


class ServerConfig(BaseSettings):
    """Identity advertised in ``initialize`` plus the stderr log level."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore", frozen=True)

    server_name: str = Field(default="MCPServer", description="serverInfo.name sent to clients.")
    server_version: str = Field(default="1.0.0", description="serverInfo.version sent to clients.")
    protocol_version: str = Field(
        default="2024-11-05", description="protocolVersion echoed from initialize."
    )
    log_level: str = Field(default="WARNING", description="Threshold for stderr logging.")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().upper()
            if value not in _LOG_LEVELS:
                raise ValueError(f"unknown log level {value!r}; expected one of {', '.join(_LOG_LEVELS)}")
        return value


@dataclass
class ConfigLoadResult:
    """Where the active configuration came from."""

    path: Path
    file_loaded: bool
    env_overrides: set[str] = field(default_factory=set)
    error: str | None = None


def config_path_for(explicit: Path | None, env: Mapping[str, str]) -> Path:
    raw = explicit or env.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    return Path(raw).expanduser()


def read_config_file(path: Path) -> dict[str, Any]:
    """Return the server settings stored in ``path`` (``{}`` when there is no file).

    Raises:
        ConfigError: The file is not valid TOML/JSON, or its root is not a table.
    """
    if not path.is_file():
        return {}

    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text) if path.suffix.lower() == ".json" else tomllib.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Syntax error in {path}: {exc}", context={"path": str(path)}) from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config root in {path} must be a mapping.", context={"path": str(path)})

    section = data.get(SERVER_TABLE)
    return dict(section) if isinstance(section, dict) else data


def env_settings(env: Mapping[str, str]) -> dict[str, str]:
    """Pick the ``MCPHOST_<FIELD>`` variables that name a ServerConfig field."""
    values: dict[str, str] = {}
    for name in ServerConfig.model_fields:
        key = f"{ENV_PREFIX}{name}".upper()
        if key in env:
            values[name] = env[key]
    return values


def load_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[ServerConfig, ConfigLoadResult]:
    """Load configuration in safe mode.

    ``env`` is layered over ``os.environ`` for this call only; the process
    environment is never modified.
    """
    env_vars = {**os.environ, **(env or {})}
    path = config_path_for(config_path, env_vars)
    overrides = env_settings(env_vars)
    meta = ConfigLoadResult(path=path, file_loaded=False, env_overrides=set(overrides))

    try:
        file_values = read_config_file(path)
        meta.file_loaded = path.is_file()
    except ConfigError as exc:
        meta.error = exc.message
        file_values = {}

    try:
        config = ServerConfig(**{**file_values, **overrides})
    except ValidationError as exc:
        meta.error = str(exc)
        # Environment values may be the invalid ones, so skip every source.
        config = ServerConfig.model_construct()

    return config, meta


__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigError",
    "ConfigLoadResult",
    "ServerConfig",
    "config_path_for",
    "env_settings",
    "load_config",
    "read_config_file",
]
