"""Configuration models and loaders for newline-bot.

Two layers are resolved here:

* :class:`Config` holds the repository-level behaviour read from the optional
  YAML file inside the checked-out workspace (``.github/newline.yml`` by
  default). A missing or malformed file never fails a run; defaults are used.
* :class:`RuntimeSettings` holds process inputs (token, workspace, paths)
  resolved from CLI flags and the GitHub Actions environment.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from newline_bot.github_client.transport import DEFAULT_API_URL

_LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = ".github/newline.yml"
DEFAULT_IGNORE_PATHS: tuple[str, ...] = (
    "bin/**",
    "node_modules/**",
    "out/**",
)

# File keys use the camelCase names documented for the YAML file.
_KEY_ALIASES = {
    "autoCommit": "auto_commit",
    "auto_commit": "auto_commit",
    "ignorePaths": "ignore_paths",
    "ignore_paths": "ignore_paths",
}


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Config(BaseModel):
    """Repository-level remediation settings."""

    model_config = ConfigDict(frozen=True, validate_default=True, extra="forbid")

    auto_commit: bool = True
    ignore_paths: tuple[str, ...] = DEFAULT_IGNORE_PATHS

    @field_validator("ignore_paths", mode="before")
    @classmethod
    def _coerce_ignore_paths(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return value

    @field_validator("ignore_paths")
    @classmethod
    def _validate_ignore_paths(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(pattern.strip() for pattern in value)
        if any(not pattern for pattern in cleaned):
            raise ValueError("ignore_paths entries cannot be empty")
        for pattern in cleaned:
            for part in pattern.lstrip("/").split("/"):
                if "**" in part and part != "**":
                    raise ValueError(f"'**' must be a whole path segment: {pattern}")
                if part == "..":
                    raise ValueError(f"pattern leaves the repository: {pattern}")
        return cleaned


class RuntimeSettings(BaseModel):
    """Resolved process inputs for a single run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    token: str
    workspace: Path
    config_path: str = DEFAULT_CONFIG_PATH
    api_url: str = DEFAULT_API_URL
    event_name: str | None = None
    event_path: Path | None = None
    log_level: LogLevel = LogLevel.INFO

    @field_validator("token")
    @classmethod
    def _validate_token(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("token cannot be empty")
        return value.strip()

    @property
    def resolved_config_path(self) -> Path:
        return self.workspace / self.config_path


def merge_config(defaults: Config, overrides: Mapping[str, Any]) -> Config:
    """Return ``defaults`` with every recognised key of ``overrides`` replaced.

    Keys may use the file's camelCase names or the model's field names. A
    provided key replaces the default value wholesale; lists are not
    concatenated. Unknown keys are ignored. Raises ``ValidationError`` when a
    recognised value has the wrong type.
    """

    updates: dict[str, Any] = {}
    for key, value in overrides.items():
        field_name = _KEY_ALIASES.get(str(key))
        if field_name is None:
            _LOGGER.debug("ignoring unknown config key: %s", key)
            continue
        updates[field_name] = value
    return Config.model_validate({**defaults.model_dump(), **updates})


def load_config(path: Path | str, *, defaults: Config | None = None) -> Config:
    """Load the YAML config file at ``path`` merged over ``defaults``.

    Never raises for a missing, unreadable or invalid file; the defaults are
    returned instead.
    """

    base = defaults or Config()
    config_path = Path(path)
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError:
        _LOGGER.info("Config file not found. Using default...")
        return base
    except (OSError, yaml.YAMLError) as exc:
        _LOGGER.info("Config file could not be read. Using default...")
        _LOGGER.debug("config load failure for %s: %s", config_path, exc)
        return base

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        _LOGGER.info("Config file is not a mapping. Using default...")
        return base

    try:
        config = merge_config(base, data)
    except ValidationError as exc:
        _LOGGER.info("Config file is invalid. Using default...")
        _LOGGER.debug("config validation failure for %s: %s", config_path, exc)
        return base

    _LOGGER.info("Config file loaded.")
    _LOGGER.debug("config: %s", config.model_dump_json())
    return config


def load_runtime_settings(
    cli_overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
) -> RuntimeSettings:
    """Resolve process inputs with CLI > environment > default precedence.

    Raises ``ValidationError`` when no token is available.
    """

    env = os.environ if env is None else env
    cli_overrides = cli_overrides or {}

    token = _first_value(
        _clean_str(cli_overrides.get("token")),
        _clean_str(env.get("INPUT_GITHUB-TOKEN")),
        _clean_str(env.get("INPUT_GITHUB_TOKEN")),
        _clean_str(env.get("GITHUB_TOKEN")),
        "",
    )
    workspace = _first_value(
        _clean_str(cli_overrides.get("workspace")),
        _clean_str(env.get("GITHUB_WORKSPACE")),
        str(Path.cwd()),
    )
    config_path = _first_value(
        _clean_str(cli_overrides.get("config_path")),
        _clean_str(env.get("INPUT_CONFIG-PATH")),
        _clean_str(env.get("INPUT_CONFIG_PATH")),
        DEFAULT_CONFIG_PATH,
    )
    api_url = _first_value(_clean_str(env.get("GITHUB_API_URL")), DEFAULT_API_URL)
    log_level = _first_value(
        _clean_str(cli_overrides.get("log_level")),
        _clean_str(env.get("NEWLINE_BOT_LOG_LEVEL")),
        "debug" if env.get("RUNNER_DEBUG") == "1" else None,
        LogLevel.INFO.value,
    )
    event_path = _clean_str(env.get("GITHUB_EVENT_PATH"))

    return RuntimeSettings(
        token=token,
        workspace=Path(workspace).expanduser().resolve(),
        config_path=config_path,
        api_url=api_url,
        event_name=_clean_str(env.get("GITHUB_EVENT_NAME")),
        event_path=Path(event_path) if event_path else None,
        log_level=_coerce_log_level(log_level),
    )


def _clean_str(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    return value


def _first_value(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _coerce_log_level(value: Any) -> LogLevel:
    if isinstance(value, LogLevel):
        return value
    if isinstance(value, str):
        try:
            return LogLevel(value.lower())
        except ValueError:
            return LogLevel.INFO
    return LogLevel.INFO


__all__ = [
    "Config",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_IGNORE_PATHS",
    "LogLevel",
    "RuntimeSettings",
    "load_config",
    "load_runtime_settings",
    "merge_config",
]
