"""Public API for shared configuration utilities."""

from .models import (
    DEFAULT_CONFIG_PATH,
    ComponentsSettings,
    LoggingSettings,
    PostgresSettings,
    TrailSettings,
    load_settings,
    resolve_component_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ComponentsSettings",
    "LoggingSettings",
    "PostgresSettings",
    "TrailSettings",
    "load_settings",
    "resolve_component_settings",
]
