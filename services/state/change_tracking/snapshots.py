"""Snapshot builder: flatten tracked fields and expand references."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from packages.trail_shared.logging import get_logger
from services.state.change_tracking.domain import ReferenceSnapshot, Scalar, Snapshot
from services.state.change_tracking.interfaces import ReferenceResolver
from services.state.change_tracking.registry import ReferenceSpec, TrackedFieldRegistry

_LOGGER = get_logger(__name__)


def normalize_scalar(value: Any) -> Scalar:
    """Coerce one row value into the closed snapshot scalar set."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return normalize_scalar(value.value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, Mapping) or (
        isinstance(value, Sequence) and not isinstance(value, str)
    ):
        return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    return str(value)


class SnapshotBuilder:
    """Build point-in-time snapshots of tracked entity rows."""

    def __init__(
        self,
        *,
        registry: TrackedFieldRegistry,
        resolver: ReferenceResolver,
    ) -> None:
        self._registry = registry
        self._resolver = resolver

    def build(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        row: Mapping[str, Any],
    ) -> Snapshot:
        """Copy tracked scalars and expand each tracked foreign key.

        References are resolved as ``tenant_id`` sees them; a key pointing at
        another tenant's row is treated as unresolved.
        """
        values = {
            field: normalize_scalar(row.get(field))
            for field in self._registry.fields_for(entity_type)
        }
        references: dict[str, ReferenceSnapshot | None] = {}
        for spec in self._registry.references_for(entity_type):
            raw_id = row.get(spec.field)
            if raw_id is None:
                references[spec.relation] = None
                continue
            resolved = self._resolve(
                session, spec=spec, tenant_id=tenant_id, entity_id=str(raw_id)
            )
            if resolved is not None:
                references[spec.relation] = resolved
        return Snapshot(values=values, references=references)

    def _resolve(
        self,
        session: Session,
        *,
        spec: ReferenceSpec,
        tenant_id: str,
        entity_id: str,
    ) -> ReferenceSnapshot | None:
        try:
            found = self._resolver.get_reference(
                session,
                entity_type=spec.entity_type,
                tenant_id=tenant_id,
                entity_id=entity_id,
                attributes=spec.attributes,
            )
        except Exception as exc:
            _LOGGER.warning(
                "reference lookup failed: relation=%s entity_type=%s entity_id=%s "
                "exception_type=%s",
                spec.relation,
                spec.entity_type,
                entity_id,
                type(exc).__name__,
                exc_info=exc,
            )
            return None

        if found is None:
            _LOGGER.warning(
                "reference unresolved: relation=%s entity_type=%s entity_id=%s",
                spec.relation,
                spec.entity_type,
                entity_id,
            )
            return None

        return ReferenceSnapshot(
            entity_type=spec.entity_type,
            id=entity_id,
            attributes={
                name: normalize_scalar(found.get(name)) for name in spec.attributes
            },
        )
