"""Component settings for the change-tracking service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from packages.trail_shared.config import TrailSettings, resolve_component_settings

SERVICE_COMPONENT_ID = "service_change_tracking"


class ChangeTrackingSettings(BaseModel):
    """Runtime knobs resolved from ``components.service.change_tracking``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tracking_enabled: bool = True
    active_flag_field: str = "is_active"
    # None: savepoint-isolate reference lookups on Postgres only.
    isolate_reference_lookups: bool | None = None
    recent_changes_limit: int = Field(default=50, gt=0)
    default_query_limit: int = Field(default=100, gt=0)
    max_query_limit: int = Field(default=1000, gt=0)

    @field_validator("active_flag_field")
    @classmethod
    def _validate_active_flag_field(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("active_flag_field is required")
        return normalized

    @model_validator(mode="after")
    def _validate_limits(self) -> "ChangeTrackingSettings":
        if self.recent_changes_limit > self.max_query_limit:
            raise ValueError("recent_changes_limit must be <= max_query_limit")
        if self.default_query_limit > self.max_query_limit:
            raise ValueError("default_query_limit must be <= max_query_limit")
        return self


def resolve_change_tracking_settings(settings: TrailSettings) -> ChangeTrackingSettings:
    """Resolve change-tracking settings from the root settings tree."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=ChangeTrackingSettings,
    )
