"""Change-tracking persistence layer."""

from services.state.change_tracking.data.repository import (
    SqlChangeRecordRepository,
    count_changes_by_entity_type,
    insert_change_record,
    list_change_records,
)
from services.state.change_tracking.data.runtime import ChangeTrackingRuntime
from services.state.change_tracking.data.schema import change_records, metadata
from services.state.change_tracking.data.unit_of_work import ChangeTrackingUnitOfWork

__all__ = [
    "ChangeTrackingRuntime",
    "ChangeTrackingUnitOfWork",
    "SqlChangeRecordRepository",
    "change_records",
    "count_changes_by_entity_type",
    "insert_change_record",
    "list_change_records",
    "metadata",
]
