"""Integration tests for change-record persistence on sqlite."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select

from packages.trail_shared.ids import generate_ulid_str
from services.state.change_tracking.data import SqlChangeRecordRepository, change_records
from services.state.change_tracking.domain import (
    ChangeKind,
    ChangeQuery,
    ChangeRecord,
    ReferenceSnapshot,
    Snapshot,
)

_BASE = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)


def _record(
    *,
    minutes: int,
    tenant_id: str = "tenant-a",
    entity_type: str = "AssetProcessingLocation",
    entity_id: str = "LOC1",
    change_kind: ChangeKind = ChangeKind.UPDATED,
    actor_id: str | None = None,
) -> ChangeRecord:
    created = change_kind == ChangeKind.CREATED
    return ChangeRecord(
        id=generate_ulid_str(),
        tenant_id=tenant_id,
        entity_type=entity_type,
        entity_id=entity_id,
        change_kind=change_kind,
        changed_field=None if created else "location_role",
        before_snapshot=None if created else Snapshot(values={"location_role": "A"}),
        after_snapshot=Snapshot(
            values={"location_role": "B", "is_active": True},
            references={
                "country": ReferenceSnapshot(
                    entity_type="Country",
                    id="C1",
                    attributes={"name": "Germany", "iso_code": "DE"},
                ),
                "transfer_mechanism": None,
            },
        ),
        actor_id=actor_id,
        reason="audit",
        occurred_at=_BASE + timedelta(minutes=minutes),
    )


@pytest.fixture
def repository() -> SqlChangeRecordRepository:
    return SqlChangeRecordRepository()


def test_round_trip_preserves_snapshots_and_utc_time(sessions, repository) -> None:
    original = _record(minutes=0, change_kind=ChangeKind.CREATED, actor_id="user-1")
    with sessions.session() as session:
        repository.insert(session, original)

    with sessions.session() as session:
        (loaded,) = repository.list_records(session, ChangeQuery(tenant_id="tenant-a"))

    assert loaded == original
    assert loaded.occurred_at.tzinfo == UTC
    assert loaded.after_snapshot.references["transfer_mechanism"] is None


def test_created_record_stores_sql_null_before_snapshot(sessions, repository) -> None:
    with sessions.session() as session:
        repository.insert(session, _record(minutes=0, change_kind=ChangeKind.CREATED))

    with sessions.session() as session:
        nulls = session.execute(
            select(change_records.c.id).where(change_records.c.before_snapshot.is_(None))
        ).all()
    assert len(nulls) == 1


def test_list_orders_ascending_and_filters(sessions, repository) -> None:
    with sessions.session() as session:
        for record in (
            _record(minutes=2),
            _record(minutes=0),
            _record(minutes=1, entity_id="LOC2"),
            _record(minutes=3, tenant_id="tenant-b"),
        ):
            repository.insert(session, record)

    with sessions.session() as session:
        everything = repository.list_records(session, ChangeQuery(tenant_id="tenant-a"))
        one_entity = repository.list_records(
            session,
            ChangeQuery(
                tenant_id="tenant-a",
                entity_type="AssetProcessingLocation",
                entity_id="LOC1",
            ),
        )
        recent = repository.list_records(
            session,
            ChangeQuery(tenant_id="tenant-a", since=_BASE + timedelta(minutes=1)),
        )

    assert [r.occurred_at for r in everything] == [
        _BASE,
        _BASE + timedelta(minutes=1),
        _BASE + timedelta(minutes=2),
    ]
    assert {r.tenant_id for r in everything} == {"tenant-a"}
    assert [r.entity_id for r in one_entity] == ["LOC1", "LOC1"]
    assert [r.occurred_at for r in recent] == [
        _BASE + timedelta(minutes=1),
        _BASE + timedelta(minutes=2),
    ]


def test_newest_first_limit_and_kind_filters(sessions, repository) -> None:
    with sessions.session() as session:
        repository.insert(session, _record(minutes=0, change_kind=ChangeKind.CREATED))
        repository.insert(session, _record(minutes=1, actor_id="user-1"))
        repository.insert(
            session, _record(minutes=2, change_kind=ChangeKind.RESTORED, actor_id="user-1")
        )

    with sessions.session() as session:
        latest = repository.list_records(
            session, ChangeQuery(tenant_id="tenant-a", newest_first=True, limit=2)
        )
        restored = repository.list_records(
            session, ChangeQuery(tenant_id="tenant-a", change_kind=ChangeKind.RESTORED)
        )
        by_actor = repository.list_records(
            session, ChangeQuery(tenant_id="tenant-a", actor_id="user-1")
        )

    assert [r.change_kind for r in latest] == [ChangeKind.RESTORED, ChangeKind.UPDATED]
    assert [r.change_kind for r in restored] == [ChangeKind.RESTORED]
    assert len(by_actor) == 2


def test_count_by_entity_type_is_tenant_scoped(sessions, repository) -> None:
    with sessions.session() as session:
        repository.insert(session, _record(minutes=0))
        repository.insert(session, _record(minutes=1))
        repository.insert(session, _record(minutes=2, entity_type="Purpose"))
        repository.insert(session, _record(minutes=3, tenant_id="tenant-b"))

    with sessions.session() as session:
        stats = repository.count_by_entity_type(session, tenant_id="tenant-a")

    assert stats == {"AssetProcessingLocation": 2, "Purpose": 1}


def test_repository_exposes_no_mutation_of_existing_records(repository) -> None:
    assert not hasattr(repository, "update")
    assert not hasattr(repository, "delete")
