"""
Runtime settings for tsfunk operators.

Settings are read from an optional YAML file and then overridden by
environment variables:

    TSFUNK_MAX_WORKERS   thread pool size for row-parallel operators
    TSFUNK_EMPTY_ROW     "nan" or "raise", policy for means over empty rows
    TSFUNK_LOG_LEVEL     level name for the "tsfunk" logger
    TSFUNK_LOG_DIR       directory for the "tsfunk" log file (none by default)

`load_settings` also reads a .env file from the working directory; the
settings loaded implicitly on first operator use do not.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from tsfunk.exceptions import ConfigurationError
from tsfunk.utils.logger import setup_logger

EMPTY_ROW_POLICIES = ("nan", "raise")

ENV_PREFIX = "TSFUNK_"

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Settings:
    """Operator runtime settings."""

    max_workers: int = 8
    empty_row: str = "nan"
    log_level: str = "WARNING"
    log_dir: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.max_workers, int) or self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be a positive integer, got: {self.max_workers!r}")
        if self.empty_row not in EMPTY_ROW_POLICIES:
            raise ConfigurationError(
                f"empty_row must be one of {EMPTY_ROW_POLICIES}, got: {self.empty_row!r}"
            )
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(f"Unknown log_level: {self.log_level!r}")


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a mapping in {path}, got {type(data).__name__}")
    unknown = set(data) - {"max_workers", "empty_row", "log_level", "log_dir"}
    if unknown:
        raise ConfigurationError(f"Unknown settings in {path}: {sorted(unknown)}")
    return data


def _read_env() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}

    workers = os.getenv(f"{ENV_PREFIX}MAX_WORKERS")
    if workers is not None:
        try:
            overrides["max_workers"] = int(workers)
        except ValueError:
            raise ConfigurationError(f"{ENV_PREFIX}MAX_WORKERS must be an integer, got: {workers!r}")

    empty_row = os.getenv(f"{ENV_PREFIX}EMPTY_ROW")
    if empty_row is not None:
        overrides["empty_row"] = empty_row.strip().lower()

    log_level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
    if log_level is not None:
        overrides["log_level"] = log_level.strip().upper()

    log_dir = os.getenv(f"{ENV_PREFIX}LOG_DIR")
    if log_dir:
        overrides["log_dir"] = log_dir

    return overrides


def load_settings(config_path: Optional[str | Path] = None, use_dotenv: bool = True) -> Settings:
    """
    Build settings from defaults, an optional YAML file and the environment.

    :param config_path: Optional path to a YAML file with settings keys
    :param use_dotenv: Read a .env file found from the working directory into
        the environment first; variables already set are not overridden
    :return: Validated Settings
    """
    if use_dotenv:
        dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path, override=False)

    values: Dict[str, Any] = {}
    if config_path is not None:
        values.update(_read_yaml(Path(config_path)))
    values.update(_read_env())

    settings = Settings(**values)
    logger.debug(f"Loaded settings: {settings}")
    return settings


def configure_logging(settings: Settings) -> logging.Logger:
    """Apply the logging part of ``settings`` to the "tsfunk" logger."""
    return setup_logger(
        name="tsfunk",
        log_dir=settings.log_dir,
        level=logging.getLevelName(settings.log_level),
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Return the process-wide settings, loading them on first use.

    Implicit loading reads defaults and TSFUNK_* variables only; call
    ``set_settings(load_settings())`` to pick up a .env file.
    """
    global _settings
    if _settings is None:
        _settings = load_settings(use_dotenv=False)
        configure_logging(_settings)
    return _settings


def set_settings(settings: Optional[Settings] = None, **changes: Any) -> Settings:
    """
    Replace the process-wide settings.

    :param settings: New settings; defaults to the current ones
    :param changes: Field overrides applied on top
    :return: The settings now in effect
    """
    global _settings
    base = settings if settings is not None else get_settings()
    _settings = replace(base, **changes) if changes else base
    configure_logging(_settings)
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next access reloads them."""
    global _settings
    _settings = None
