"""Unit tests for snapshot building and scalar normalization."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from services.state.change_tracking.registry import default_registry
from services.state.change_tracking.snapshots import SnapshotBuilder, normalize_scalar


class _Risk(Enum):
    HIGH = "HIGH"


class _FakeResolver:
    """Reference resolver double keyed by (entity_type, id)."""

    def __init__(self, rows: dict[tuple[str, str], dict], *, fail: bool = False) -> None:
        self.rows = rows
        self.fail = fail
        self.calls: list[tuple[str, str, str, tuple[str, ...]]] = []

    def get_reference(self, session, *, entity_type, tenant_id, entity_id, attributes):
        del session
        self.calls.append((entity_type, tenant_id, entity_id, tuple(attributes)))
        if self.fail:
            raise RuntimeError("lookup exploded")
        row = self.rows.get((entity_type, entity_id))
        return None if row is None else {name: row[name] for name in attributes}


def _location_row(**overrides) -> dict:
    row = {
        "id": "LOC1",
        "tenant_id": "tenant-a",
        "service": "Storage",
        "country_id": "C1",
        "transfer_mechanism_id": None,
        "location_role": "HOSTING",
        "metadata": {"noise": True},
        "is_active": True,
    }
    row.update(overrides)
    return row


def test_normalize_scalar_covers_non_scalar_row_values() -> None:
    assert normalize_scalar(True) is True
    assert normalize_scalar(3) == 3
    assert normalize_scalar(_Risk.HIGH) == "HIGH"
    assert normalize_scalar(Decimal("1.50")) == "1.50"
    assert (
        normalize_scalar(datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC))
        == "2026-01-02T03:04:05+00:00"
    )
    assert normalize_scalar({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'


def test_snapshot_holds_only_tracked_fields_and_expands_references() -> None:
    resolver = _FakeResolver(
        {
            ("Country", "C1"): {
                "name": "Germany",
                "iso_code": "DE",
                "gdpr_status": "EU",
                "created_at": "ignored",
            }
        }
    )
    builder = SnapshotBuilder(registry=default_registry(), resolver=resolver)

    snapshot = builder.build(
        None, entity_type="AssetProcessingLocation", tenant_id="tenant-a", row=_location_row()
    )

    assert snapshot.values == {
        "country_id": "C1",
        "transfer_mechanism_id": None,
        "location_role": "HOSTING",
        "is_active": True,
    }
    country = snapshot.references["country"]
    assert country is not None
    assert country.entity_type == "Country"
    assert country.id == "C1"
    assert country.attributes == {"name": "Germany", "iso_code": "DE", "gdpr_status": "EU"}
    assert snapshot.references["transfer_mechanism"] is None
    assert resolver.calls == [
        ("Country", "tenant-a", "C1", ("name", "iso_code", "gdpr_status"))
    ]


def test_unresolvable_reference_is_omitted_and_raw_key_kept(caplog) -> None:
    builder = SnapshotBuilder(registry=default_registry(), resolver=_FakeResolver({}))

    with caplog.at_level(logging.WARNING):
        snapshot = builder.build(
            None,
            entity_type="AssetProcessingLocation",
            tenant_id="tenant-a",
            row=_location_row(),
        )

    assert "country" not in snapshot.references
    assert snapshot.values["country_id"] == "C1"
    assert "reference unresolved" in caplog.text


def test_failing_reference_lookup_does_not_raise(caplog) -> None:
    builder = SnapshotBuilder(
        registry=default_registry(), resolver=_FakeResolver({}, fail=True)
    )

    with caplog.at_level(logging.WARNING):
        snapshot = builder.build(
            None,
            entity_type="AssetProcessingLocation",
            tenant_id="tenant-a",
            row=_location_row(),
        )

    assert "country" not in snapshot.references
    assert "reference lookup failed" in caplog.text


def test_untracked_type_builds_empty_snapshot() -> None:
    builder = SnapshotBuilder(registry=default_registry(), resolver=_FakeResolver({}))
    snapshot = builder.build(
        None, entity_type="Country", tenant_id="tenant-a", row={"name": "Germany"}
    )
    assert snapshot.values == {}
    assert snapshot.references == {}
