"""Settings resolution for the shared relational substrate."""

from __future__ import annotations

from packages.trail_shared.config import PostgresSettings, TrailSettings


def resolve_postgres_settings(settings: TrailSettings) -> PostgresSettings:
    """Return validated Postgres settings from the root settings tree."""
    return PostgresSettings.model_validate(settings.postgres.model_dump(mode="python"))


__all__ = ["PostgresSettings", "resolve_postgres_settings"]
