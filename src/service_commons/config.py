"""
YAML-backed settings loading shared by the services.

Settings models declare every field without defaults; this module only knows
how to locate the file, parse it, validate it against the model and cache
the result.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

if TYPE_CHECKING:
    from collections.abc import Callable

REDACTION_MARKER = "[REDACTED]"

SENSITIVE_KEY_FRAGMENTS: tuple[str, ...] = ("secret", "password", "token", "authorization")

SettingsT = TypeVar("SettingsT", bound=BaseModel)


class ConfigurationError(Exception):
    """Raised when the configuration file is missing, unreadable or invalid."""


def get_config_path(env_var_name: str, default_filename: str) -> Path:
    """Resolve the config file from an environment variable or the working directory."""
    override = os.environ.get(env_var_name)
    if override:
        return Path(override)
    return Path.cwd() / default_filename


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Read a YAML mapping from disk."""
    try:
        raw = yaml.safe_load(config_path.read_text())
    except FileNotFoundError as exc:
        msg = f"Configuration file not found: {config_path}"
        raise ConfigurationError(msg) from exc
    except yaml.YAMLError as exc:
        msg = f"Configuration file is not valid YAML: {config_path}"
        raise ConfigurationError(msg) from exc

    if not isinstance(raw, dict):
        msg = f"Configuration root must be a mapping: {config_path}"
        raise ConfigurationError(msg)
    return raw


def create_settings_loader(
    settings_model: type[SettingsT],
    config_path_resolver: Callable[[], Path],
) -> tuple[Callable[[], SettingsT], Callable[[], None]]:
    """
    Build a cached ``get_settings`` function and its cache-clearing companion.

    Validation errors propagate as pydantic ``ValidationError`` so startup fails
    loudly on missing or unknown keys.
    """

    @lru_cache(maxsize=1)
    def get_settings() -> SettingsT:
        raw = load_yaml_config(config_path_resolver())
        return settings_model.model_validate(raw)

    def clear_settings_cache() -> None:
        get_settings.cache_clear()

    return get_settings, clear_settings_cache


def is_sensitive_key(key: str) -> bool:
    """Return True when a key name looks like it holds a credential."""
    lowered = key.lower()
    return any(fragment in lowered for fragment in SENSITIVE_KEY_FRAGMENTS)


def redact(value: Any, marker: str) -> Any:
    """Recursively replace values stored under sensitive keys."""
    if isinstance(value, dict):
        return {
            key: marker if is_sensitive_key(str(key)) else redact(item, marker)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact(item, marker) for item in value]
    return value


def get_safe_model_config(settings: BaseModel, marker: str) -> dict[str, Any]:
    """Dump a settings model with sensitive values redacted."""
    return redact(settings.model_dump(), marker)


__all__ = [
    "REDACTION_MARKER",
    "ConfigurationError",
    "ValidationError",
    "create_settings_loader",
    "get_config_path",
    "get_safe_model_config",
    "is_sensitive_key",
    "load_yaml_config",
    "redact",
]
