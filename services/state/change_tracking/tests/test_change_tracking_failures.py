"""Failure semantics: atomicity, unreadable snapshots and tenant checks."""

from __future__ import annotations

import logging

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.exc import OperationalError

from packages.trail_shared.errors import ErrorCategory, codes
from services.state.change_tracking.config import ChangeTrackingSettings
from services.state.change_tracking.data import (
    ChangeTrackingUnitOfWork,
    SqlChangeRecordRepository,
    change_records,
)
from services.state.change_tracking.errors import (
    ChangeTrackingStorageError,
    SnapshotUnavailableError,
    TenantIsolationError,
)
from services.state.change_tracking.implementation import DefaultChangeTrackingService
from services.state.entity_store import SqlEntityStore, UnknownEntityTypeError
from services.state.entity_store.data.schema import digital_assets


class _FailingRepository(SqlChangeRecordRepository):
    """Repository whose inserts fail like a dropped connection."""

    def insert(self, session, record) -> None:
        del session, record
        raise OperationalError("INSERT INTO change_records", {}, Exception("server closed"))


class _VanishingStore(SqlEntityStore):
    """Store whose rows become unreadable once an update has run."""

    def __init__(self) -> None:
        super().__init__()
        self.updated = False

    def update(self, session, **kwargs):
        row = super().update(session, **kwargs)
        self.updated = True
        return row

    def get(self, session, **kwargs):
        if self.updated:
            return None
        return super().get(session, **kwargs)


class _ForeignTenantStore(SqlEntityStore):
    """Store that leaks rows owned by another tenant."""

    def get(self, session, **kwargs):
        row = super().get(session, **kwargs)
        if row is not None:
            row["tenant_id"] = "tenant-other"
        return row


def _count(sessions, table) -> int:
    with sessions.session() as session:
        return session.execute(select(func.count()).select_from(table)).scalar_one()


def _asset_values(**overrides) -> dict:
    values = {"name": "CRM", "type": "SAAS", "contains_personal_data": True}
    values.update(overrides)
    return values


def test_record_write_failure_rolls_back_the_mutation(sessions) -> None:
    service = DefaultChangeTrackingService(
        settings=ChangeTrackingSettings(),
        unit_of_work=ChangeTrackingUnitOfWork(sessions),
        store=SqlEntityStore(),
        repository=_FailingRepository(),
    )

    with pytest.raises(ChangeTrackingStorageError) as exc_info:
        service.create_entity("DigitalAsset", tenant_id="tenant-a", values=_asset_values())

    error = exc_info.value.error
    assert error.category == ErrorCategory.DEPENDENCY
    assert error.code == codes.CHANGE_RECORD_STORAGE_FAILURE
    assert error.retryable is True
    assert error.metadata["exception_type"] == "OperationalError"
    assert isinstance(exc_info.value.__cause__, OperationalError)
    assert _count(sessions, digital_assets) == 0
    assert _count(sessions, change_records) == 0


def test_unreadable_after_snapshot_is_fatal_and_rolled_back(make_service, sessions) -> None:
    store = _VanishingStore()
    service = make_service(store=store)
    asset = service.create_entity(
        "DigitalAsset", tenant_id="tenant-a", values=_asset_values()
    )

    with pytest.raises(SnapshotUnavailableError) as exc_info:
        service.update_entity(
            "DigitalAsset",
            tenant_id="tenant-a",
            entity_id=asset["id"],
            values={"contains_personal_data": False},
        )

    assert exc_info.value.error.category == ErrorCategory.INTERNAL
    store.updated = False
    with sessions.session() as session:
        row = store.get(
            session, entity_type="DigitalAsset", tenant_id="tenant-a", entity_id=asset["id"]
        )
    assert row["contains_personal_data"] is True
    assert _count(sessions, change_records) == 1


def test_foreign_tenant_row_is_refused_before_mutation(make_service, sessions) -> None:
    plain = make_service()
    asset = plain.create_entity("DigitalAsset", tenant_id="tenant-a", values=_asset_values())
    leaky = make_service(store=_ForeignTenantStore())

    with pytest.raises(TenantIsolationError) as exc_info:
        leaky.update_entity(
            "DigitalAsset",
            tenant_id="tenant-a",
            entity_id=asset["id"],
            values={"name": "Renamed"},
        )

    assert exc_info.value.error.category == ErrorCategory.POLICY
    assert exc_info.value.error.code == codes.TENANT_MISMATCH
    assert len(plain.list_changes("tenant-a")) == 1


def test_store_validation_errors_propagate_unwrapped(service) -> None:
    with pytest.raises(UnknownEntityTypeError):
        service.create_entity("Spaceship", tenant_id="tenant-a", values={})
    with pytest.raises(ValueError, match="unknown fields"):
        service.create_entity(
            "DigitalAsset", tenant_id="tenant-a", values=_asset_values(colour="red")
        )


class _BrokenLookupStore(SqlEntityStore):
    """Store whose reference lookups fail inside the database."""

    def __init__(self) -> None:
        super().__init__(isolate_reference_lookups=True)

    def _reference_statement(self, table, **kwargs):
        del table, kwargs
        return text("SELECT legal_name FROM missing_reference_table")


def test_failed_reference_lookup_is_contained_and_mutation_commits(
    sessions, caplog
) -> None:
    store = _BrokenLookupStore()
    service = DefaultChangeTrackingService(
        settings=ChangeTrackingSettings(isolate_reference_lookups=True),
        unit_of_work=ChangeTrackingUnitOfWork(sessions),
        store=store,
        repository=SqlChangeRecordRepository(),
    )
    germany = service.create_entity(
        "Country",
        tenant_id="tenant-a",
        values={"name": "Germany", "iso_code": "DE", "gdpr_status": "EU"},
    )

    with caplog.at_level(logging.WARNING):
        asset = service.create_entity(
            "DigitalAsset",
            tenant_id="tenant-a",
            values=_asset_values(primary_hosting_country_id=germany["id"]),
        )
        service.update_entity(
            "DigitalAsset",
            tenant_id="tenant-a",
            entity_id=asset["id"],
            values={"contains_personal_data": False},
        )

    created, updated = service.entity_history("tenant-a", "DigitalAsset", asset["id"])
    assert "primary_hosting_country" not in created.after_snapshot.references
    assert created.after_snapshot.values["primary_hosting_country_id"] == germany["id"]
    assert updated.changed_field == "contains_personal_data"
    assert _count(sessions, digital_assets) == 1
    assert "reference lookup failed" in caplog.text
