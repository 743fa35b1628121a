"""Store facade: the single entry point to the aggregate store.

`Store` normalizes caller input, delegates to the injected `StorageAdapter`,
and turns the adapter's conflict outcome into `ConflictError`. It holds no
state beyond the adapter and applies no business rules, so swapping adapters
never touches this module.

Typical command-handler loop (the retry lives with the caller):

    while True:
        snapshot = store.get_snapshot(agg_id, min_sequence=0)
        tail = store.get_events(agg_id, snapshot.sequence if snapshot else 0)
        new_events = decide(snapshot, tail, command)
        try:
            store.commit_events(new_events)
        except ConflictError:
            continue
        break
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from aggstore.interfaces.errors import ConflictError, InvalidRecordError
from aggstore.interfaces.records import (
    AggregateId,
    Event,
    EventBatch,
    Snapshot,
    normalize_aggregate_id,
)
from aggstore.interfaces.storage_adapter import CommitOutcome

if TYPE_CHECKING:
    from aggstore.interfaces.storage_adapter import StorageAdapter

logger = logging.getLogger(__name__)


class Store:
    """Facade over the active storage adapter.

    Args:
        adapter: The storage backend. Chosen once at configuration time (see
            `aggstore.bootstrap.build_store`) and held for the Store's lifetime.
    """

    def __init__(self, adapter: StorageAdapter) -> None:
        self.adapter = adapter

    def __repr__(self) -> str:
        return f"Store(adapter={type(self.adapter).__name__})"

    # --- event log ---

    def commit_events(self, events: Event | Iterable[Event]) -> None:
        """Atomically append one event or a batch of events to one aggregate.

        Args:
            events: A single `Event` or an iterable of events, all for the same
                aggregate, with pairwise-distinct sequences.

        Raises:
            InvalidRecordError: if the batch is empty, mixes aggregates, or
                repeats a sequence.
            ConflictError: if any `(aggregate_id, sequence)` is already taken.
                Nothing was committed; recompute against fresh state and retry.
            TransportError: on any failure below the store.
        """
        batch = EventBatch.from_events(events)
        logger.debug(
            "Committing %d event(s) to aggregate %s",
            len(batch.events),
            batch.aggregate_id,
        )
        outcome = self.adapter.commit_events(batch)
        if outcome is CommitOutcome.CONFLICT:
            logger.info(
                "Commit to aggregate %s rejected: sequence conflict on %s",
                batch.aggregate_id,
                list(batch.sequences),
            )
            raise ConflictError(batch.aggregate_id, batch.sequences)

    def get_events(
        self, aggregate_id: AggregateId, after_sequence: int = 0
    ) -> list[Event]:
        """Return the aggregate's events with `sequence > after_sequence`, ascending.

        An unknown aggregate or a bound at/after the tail yields ``[]``.

        Raises:
            InvalidRecordError: if `aggregate_id` is blank or a naive datetime.
            ValueError: if after_sequence < 0.
            TransportError: on any failure below the store.
        """
        aggregate_id = normalize_aggregate_id(aggregate_id)
        events = list(self.adapter.get_events(aggregate_id, after_sequence))
        logger.debug(
            "Read %d event(s) from aggregate %s after sequence %s",
            len(events),
            aggregate_id,
            after_sequence,
        )
        return events

    # --- snapshot cache ---

    def commit_snapshot(self, snapshot: Snapshot) -> None:
        """Cache `snapshot` unless an equal-or-newer one is already stored.

        Raises:
            InvalidRecordError: if `snapshot` is not a Snapshot.
            TransportError: on any failure below the store.
        """
        if not isinstance(snapshot, Snapshot):
            raise InvalidRecordError(
                f"Expected a Snapshot, got {type(snapshot).__name__}."
            )
        logger.debug(
            "Committing snapshot for aggregate %s at sequence %s",
            snapshot.aggregate_id,
            snapshot.sequence,
        )
        self.adapter.commit_snapshot(snapshot)

    def get_snapshot(
        self, aggregate_id: AggregateId, min_sequence: int = 0
    ) -> Snapshot | None:
        """Return the cached snapshot if it covers at least `min_sequence`.

        Returns None when no snapshot exists or the stored one is older than
        `min_sequence`; the caller then falls back to the event log.

        Raises:
            InvalidRecordError: if `aggregate_id` is blank or a naive datetime.
            ValueError: if min_sequence < 0.
            TransportError: on any failure below the store.
        """
        aggregate_id = normalize_aggregate_id(aggregate_id)
        snapshot = self.adapter.get_snapshot(aggregate_id, min_sequence)
        logger.debug(
            "Snapshot lookup for aggregate %s (min sequence %s): %s",
            aggregate_id,
            min_sequence,
            "hit" if snapshot is not None else "miss",
        )
        return snapshot
