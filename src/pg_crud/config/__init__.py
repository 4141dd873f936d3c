"""Configuration management module."""

from pg_crud.config.settings import (
    DEFAULT_ALLOWED_TABLES,
    AdminConfig,
    DatabaseConfig,
    ObservabilityConfig,
    ServerConfig,
    Settings,
    get_settings,
    reset_settings,
)

__all__ = [
    "DEFAULT_ALLOWED_TABLES",
    "AdminConfig",
    "DatabaseConfig",
    "ObservabilityConfig",
    "ServerConfig",
    "Settings",
    "get_settings",
    "reset_settings",
]
