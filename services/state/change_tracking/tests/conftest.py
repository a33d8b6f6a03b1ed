"""Fixtures for change-tracking tests."""

from __future__ import annotations

import pytest

from resources.substrates.postgres.session import TransactionalSessionProvider
from services.state.change_tracking.config import ChangeTrackingSettings
from services.state.change_tracking.data import (
    ChangeTrackingUnitOfWork,
    SqlChangeRecordRepository,
)
from services.state.change_tracking.implementation import DefaultChangeTrackingService
from services.state.entity_store import SqlEntityStore


def _build_service(
    sessions: TransactionalSessionProvider,
    *,
    tracking_enabled: bool = True,
    store=None,
) -> DefaultChangeTrackingService:
    return DefaultChangeTrackingService(
        settings=ChangeTrackingSettings(tracking_enabled=tracking_enabled),
        unit_of_work=ChangeTrackingUnitOfWork(sessions),
        store=SqlEntityStore() if store is None else store,
        repository=SqlChangeRecordRepository(),
    )


@pytest.fixture
def service(sessions: TransactionalSessionProvider) -> DefaultChangeTrackingService:
    return _build_service(sessions)


@pytest.fixture
def germany(service: DefaultChangeTrackingService) -> dict:
    return service.create_entity(
        "Country",
        tenant_id="tenant-a",
        values={"name": "Germany", "iso_code": "DE", "gdpr_status": "EU"},
    )


@pytest.fixture
def scc(service: DefaultChangeTrackingService) -> dict:
    return service.create_entity(
        "TransferMechanism",
        tenant_id="tenant-a",
        values={
            "name": "Standard Contractual Clauses",
            "code": "SCC",
            "gdpr_article": "46(2)(c)",
        },
    )


@pytest.fixture
def make_service(sessions: TransactionalSessionProvider):
    """Return a builder for services with custom settings or store."""

    def _make(*, tracking_enabled: bool = True, store=None) -> DefaultChangeTrackingService:
        return _build_service(sessions, tracking_enabled=tracking_enabled, store=store)

    return _make
