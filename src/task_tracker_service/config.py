"""
Configuration management for the task tracker service.

Loads configuration from YAML with ZERO defaults.
Every value must be explicitly specified or startup fails.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from service_commons.config import (
    REDACTION_MARKER,
    create_settings_loader,
    get_safe_model_config,
)
from service_commons.config import (
    get_config_path as resolve_config_path,
)

if TYPE_CHECKING:
    from pathlib import Path

MIN_SECRET_LENGTH = 32


class ServiceConfig(BaseModel):
    """Service identity configuration."""

    model_config = ConfigDict(extra="forbid")
    name: str
    version: str


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    model_config = ConfigDict(extra="forbid")
    host: str
    port: int
    log_level: str


class LoggingConfig(BaseModel):
    """Logging configuration. A null directory logs to stdout only."""

    model_config = ConfigDict(extra="forbid")
    level: str
    directory: str | None


class DatabaseConfig(BaseModel):
    """Database configuration."""

    model_config = ConfigDict(extra="forbid")
    path: str


class AuthConfig(BaseModel):
    """Bearer token signing configuration."""

    model_config = ConfigDict(extra="forbid")
    jwt_secret: str
    token_ttl_seconds: int

    @field_validator("jwt_secret")
    @classmethod
    def _secret_long_enough(cls, value: str) -> str:
        if len(value) < MIN_SECRET_LENGTH:
            msg = f"jwt_secret must be at least {MIN_SECRET_LENGTH} characters"
            raise ValueError(msg)
        return value

    @field_validator("token_ttl_seconds")
    @classmethod
    def _ttl_positive(cls, value: int) -> int:
        if value <= 0:
            msg = "token_ttl_seconds must be positive"
            raise ValueError(msg)
        return value


class PasswordConfig(BaseModel):
    """Argon2 password hashing parameters."""

    model_config = ConfigDict(extra="forbid")
    time_cost: int
    memory_cost: int
    parallelism: int


class PaginationConfig(BaseModel):
    """Task listing page-size policy."""

    model_config = ConfigDict(extra="forbid")
    default_limit: int
    max_limit: int

    @model_validator(mode="after")
    def _limits_consistent(self) -> PaginationConfig:
        if self.max_limit < 1:
            msg = "max_limit must be at least 1"
            raise ValueError(msg)
        if not 1 <= self.default_limit <= self.max_limit:
            msg = "default_limit must be between 1 and max_limit"
            raise ValueError(msg)
        return self


class RequestConfig(BaseModel):
    """Request handling configuration."""

    model_config = ConfigDict(extra="forbid")
    max_body_size: int
    timeout_seconds: float


class DiagnosticsConfig(BaseModel):
    """Non-production diagnostics. Never enable expose_stack_traces in production."""

    model_config = ConfigDict(extra="forbid")
    expose_stack_traces: bool


class Settings(BaseModel):
    """
    Root configuration container.

    All fields are REQUIRED. No defaults exist.
    Missing fields cause immediate startup failure.
    """

    model_config = ConfigDict(extra="forbid")
    service: ServiceConfig
    server: ServerConfig
    logging: LoggingConfig
    database: DatabaseConfig
    auth: AuthConfig
    password: PasswordConfig
    pagination: PaginationConfig
    request: RequestConfig
    diagnostics: DiagnosticsConfig


def get_config_path() -> Path:
    """Determine configuration file path."""
    return resolve_config_path(
        env_var_name="CONFIG_PATH",
        default_filename="config.yaml",
    )


get_settings, clear_settings_cache = create_settings_loader(Settings, get_config_path)  # nosemgrep


def get_safe_config() -> dict[str, Any]:
    """Get configuration with sensitive values redacted."""
    return get_safe_model_config(get_settings(), REDACTION_MARKER)
