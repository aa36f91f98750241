"""Build the gate configuration from the environment.

The hook takes no arguments. Everything arrives through environment
variables set by the hook wrapper (or CI), plus an optional YAML settings
file for repository-wide overrides.

Environment:
    buf_path / SCHEMAGATE_CHECKER       checker executable reference
    buf_config / SCHEMAGATE_CONFIG      checker config file reference
    WORKSPACE / SCHEMAGATE_WORKSPACE    file or directory at the repository root
    CI                                  "true" selects automated mode
    SCHEMAGATE_MAINLINE                 mainline branch (default: master)
    SCHEMAGATE_REMOTE                   remote to fetch mainline from (default: origin)
    SCHEMAGATE_SETTINGS                 optional YAML settings file
    SCHEMAGATE_LOG_LEVEL                console log level (default: WARNING)
    SCHEMAGATE_LOG_DIR                  enables rotating file logs in this directory
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigError
from .models import ExecutionMode, GateConfig

logger = logging.getLogger("schemagate.config")

# First name wins; the short names are what the hook wrapper exports
CHECKER_VARS = ("buf_path", "SCHEMAGATE_CHECKER")
CONFIG_VARS = ("buf_config", "SCHEMAGATE_CONFIG")
WORKSPACE_VARS = ("WORKSPACE", "SCHEMAGATE_WORKSPACE")

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    """Optional overrides read from SCHEMAGATE_SETTINGS."""

    model_config = ConfigDict(extra="forbid")

    mainline_branch: str | None = None
    remote: str | None = None
    checker_command: str | None = None
    log_level: LogLevel | None = None
    log_dir: str | None = None


def detect_mode(environ: Mapping[str, str]) -> ExecutionMode:
    """Automated when CI is exactly "true", interactive otherwise."""
    if environ.get("CI", "") == "true":
        return "automated"
    return "interactive"


def _first_set(environ: Mapping[str, str], names: tuple[str, ...]) -> str:
    for name in names:
        value = environ.get(name, "")
        if value:
            return value
    raise ConfigError(f"Missing required environment variable: {' or '.join(names)}")


def load_settings(path: Path) -> Settings:
    """Load a YAML settings file into a Settings model."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in settings file {path}", str(e)) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path}", str(e)) from e


def settings_from_environ(environ: Mapping[str, str] | None = None) -> Settings:
    """Merge the settings file (if any) with SCHEMAGATE_* overrides.

    Environment variables take precedence over the file.
    """
    if environ is None:
        environ = os.environ

    settings_path = environ.get("SCHEMAGATE_SETTINGS")
    settings = load_settings(Path(settings_path)) if settings_path else Settings()

    overrides = {
        "mainline_branch": environ.get("SCHEMAGATE_MAINLINE"),
        "remote": environ.get("SCHEMAGATE_REMOTE"),
        "log_level": environ.get("SCHEMAGATE_LOG_LEVEL", "").upper() or None,
        "log_dir": environ.get("SCHEMAGATE_LOG_DIR"),
    }
    update = {key: value for key, value in overrides.items() if value}
    if not update:
        return settings

    try:
        return Settings(**{**settings.model_dump(), **update})
    except ValidationError as e:
        raise ConfigError("Invalid SCHEMAGATE_* environment override", str(e)) from e


def load_config(environ: Mapping[str, str] | None = None, settings: Settings | None = None) -> GateConfig:
    """Build a GateConfig from the environment.

    Args:
        environ: Environment mapping (default: os.environ)
        settings: Pre-loaded settings (default: read via settings_from_environ)

    Raises:
        ConfigError: A required reference is missing or a setting is invalid.
    """
    if environ is None:
        environ = os.environ
    if settings is None:
        settings = settings_from_environ(environ)

    values = {
        "checker_ref": Path(_first_set(environ, CHECKER_VARS)),
        "config_ref": Path(_first_set(environ, CONFIG_VARS)),
        "workspace_ref": Path(_first_set(environ, WORKSPACE_VARS)),
        "mode": detect_mode(environ),
    }
    for key in ("mainline_branch", "remote", "checker_command"):
        value = getattr(settings, key)
        if value is not None:
            values[key] = value

    try:
        config = GateConfig(**values)
    except ValidationError as e:
        raise ConfigError("Invalid gate configuration", str(e)) from e

    logger.debug(f"Loaded config: mode={config.mode}, mainline={config.remote}/{config.mainline_branch}")
    return config
