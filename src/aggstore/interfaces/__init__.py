"""Interfaces (application boundary) for aggstore.

Defines framework-free contracts shared by the service layer and adapters:
the `Event`/`Snapshot` records, the `StorageAdapter` port, and the error
taxonomy. No persistence code lives here.

Dependency rule: this package does not import from adapters, bootstrap, or
entrypoints. It may be imported by every other `aggstore` package.
"""

from .errors import (
    ConflictError,
    InvalidRecordError,
    StoreError,
    TransportError,
)
from .records import AggregateId, Event, EventBatch, Snapshot, normalize_aggregate_id
from .storage_adapter import CommitOutcome, StorageAdapter

__all__ = [
    "AggregateId",
    "CommitOutcome",
    "ConflictError",
    "Event",
    "EventBatch",
    "InvalidRecordError",
    "Snapshot",
    "StorageAdapter",
    "StoreError",
    "TransportError",
    "normalize_aggregate_id",
]
