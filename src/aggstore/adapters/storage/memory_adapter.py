"""In-memory storage adapter.

All events and snapshots live in the adapter instance and are lost when it is
discarded. Use for unit tests, prototyping, or anywhere durability is not
required.

A single mutex stands in for the transactional guarantees a database gives
the SQLAlchemy adapter: each operation observes and mutates the maps
atomically, so concurrent callers in one process see the same commit and
compare-and-replace semantics. It offers nothing across processes.

Bodies are stored as JSON round-tripped copies and handed out as fresh copies,
so neither the committing caller nor a reader can change what is stored.
A body JSON cannot encode fails the same way it does against a database: with
`TransportError`, and nothing stored.

This implementation passes all contract tests for the StorageAdapter port.
"""

import copy
import dataclasses
import json
import threading
from collections.abc import Sequence
from typing import Any

from aggstore.interfaces.errors import TransportError
from aggstore.interfaces.records import Event, EventBatch, Snapshot
from aggstore.interfaces.storage_adapter import (
    CommitOutcome,
    StorageAdapter,
    check_after_sequence,
    check_min_sequence,
)


def _stored_body(body: dict[str, Any]) -> dict[str, Any]:
    """Return the detached copy of `body` that a JSON column would hold."""
    try:
        return json.loads(json.dumps(body, allow_nan=False))
    except (TypeError, ValueError) as e:
        raise TransportError(f"Cannot serialize body: {e}") from e


class InMemoryStorageAdapter(StorageAdapter):
    """In-memory StorageAdapter for testing and non-durable use cases."""

    name = "memory"

    def __init__(self):
        self._lock = threading.Lock()
        self._events: dict[str, dict[int, Event]] = {}
        self._snapshots: dict[str, Snapshot] = {}

    # --------------------------------------------------------------------- #
    # Event log
    # --------------------------------------------------------------------- #

    def commit_events(self, batch: EventBatch) -> CommitOutcome:
        stored = [
            dataclasses.replace(event, body=_stored_body(event.body))
            for event in batch.events
        ]
        with self._lock:
            log = self._events.get(batch.aggregate_id, {})
            if any(sequence in log for sequence in batch.sequences):
                return CommitOutcome.CONFLICT
            log = self._events.setdefault(batch.aggregate_id, {})
            for event in stored:
                log[event.sequence] = event
        return CommitOutcome.COMMITTED

    def get_events(self, aggregate_id: str, after_sequence: int) -> Sequence[Event]:
        check_after_sequence(after_sequence)
        with self._lock:
            log = dict(self._events.get(aggregate_id, {}))
        return [
            dataclasses.replace(log[seq], body=copy.deepcopy(log[seq].body))
            for seq in sorted(log)
            if seq > after_sequence
        ]

    # --------------------------------------------------------------------- #
    # Snapshot cache
    # --------------------------------------------------------------------- #

    def commit_snapshot(self, snapshot: Snapshot) -> None:
        stored = dataclasses.replace(snapshot, body=_stored_body(snapshot.body))
        with self._lock:
            current = self._snapshots.get(snapshot.aggregate_id)
            if current is None or current.sequence < stored.sequence:
                self._snapshots[snapshot.aggregate_id] = stored

    def get_snapshot(self, aggregate_id: str, min_sequence: int) -> Snapshot | None:
        check_min_sequence(min_sequence)
        with self._lock:
            snapshot = self._snapshots.get(aggregate_id)
        if snapshot is None or not snapshot.is_fresh_for(min_sequence):
            return None
        return dataclasses.replace(snapshot, body=copy.deepcopy(snapshot.body))
