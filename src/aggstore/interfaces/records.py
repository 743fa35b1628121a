"""Records persisted by the aggregate store.

- `Event`: an immutable fact at a given sequence of an aggregate's history.
- `Snapshot`: a cached materialization of an aggregate through a sequence.
- `EventBatch`: the unit of atomic commit: one aggregate, at least one event,
  pairwise-distinct sequences.

All three validate their invariants at construction and raise
`InvalidRecordError` on violation, so adapters can trust what they receive.

Identifiers:
    `aggregate_id` is opaque, totally ordered and equality-comparable. A
    non-empty string is used as given. A tz-aware `datetime` is normalized to
    a fixed-width UTC ISO-8601 string (``2026-10-17T09:30:00.000000Z``), which
    sorts in the same order as the instants it names.

Timestamps:
    `Event.timestamp` is supplied by the caller and must be tz-aware. The store
    persists it as UTC and never replaces it with a server clock.

Bodies:
    A body is a JSON object: a dict with string keys whose values JSON can
    encode (no NaN or infinities).
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TypeAlias

from .errors import InvalidRecordError

AggregateId: TypeAlias = str | datetime

#: Canonical string form of a datetime aggregate id.
DATETIME_ID_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def normalize_aggregate_id(aggregate_id: AggregateId) -> str:
    """Return the canonical string form of `aggregate_id`.

    Raises:
        InvalidRecordError: for blank strings, naive datetimes, or other types.
    """
    if isinstance(aggregate_id, datetime):
        if aggregate_id.tzinfo is None or aggregate_id.utcoffset() is None:
            raise InvalidRecordError("datetime aggregate_id must be tz-aware.")
        return aggregate_id.astimezone(timezone.utc).strftime(DATETIME_ID_FORMAT)
    if not isinstance(aggregate_id, str) or not aggregate_id.strip():
        raise InvalidRecordError(
            "aggregate_id must be a non-empty string or a tz-aware datetime."
        )
    return aggregate_id


def _require_sequence(sequence: int) -> None:
    # bool is an int subclass; reject it explicitly
    if isinstance(sequence, bool) or not isinstance(sequence, int):
        raise InvalidRecordError("sequence must be an integer.")
    if sequence < 1:
        raise InvalidRecordError("sequence must be >= 1")


def _require_body(body: Any) -> None:
    if not isinstance(body, dict):
        raise InvalidRecordError("body must be a mapping of str to values.")
    if not all(isinstance(key, str) for key in body):
        raise InvalidRecordError("body keys must be strings.")
    try:
        json.dumps(body, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise InvalidRecordError(f"body must be JSON-serializable: {e}") from e


@dataclass(frozen=True, slots=True)
class Event:
    """An immutable fact in an aggregate's history.

    A datetime `aggregate_id` is stored in its canonical string form.
    """

    aggregate_id: AggregateId
    sequence: int
    timestamp: datetime
    type: str
    body: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "aggregate_id", normalize_aggregate_id(self.aggregate_id)
        )
        _require_sequence(self.sequence)
        if not isinstance(self.timestamp, datetime):
            raise InvalidRecordError("timestamp must be a datetime.")
        if self.timestamp.tzinfo is None or self.timestamp.utcoffset() is None:
            raise InvalidRecordError("timestamp must be tz-aware.")
        if not isinstance(self.type, str) or not self.type.strip():
            raise InvalidRecordError("type must be a non-empty string.")
        _require_body(self.body)

    def as_row(self) -> dict[str, Any]:
        """Return the event as an insertable ``events`` row."""
        return {
            "aggregate_id": self.aggregate_id,
            "sequence": self.sequence,
            "timestamp": self.timestamp,
            "type": self.type,
            "body": self.body,
        }


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Aggregate state as of `sequence` (inclusive)."""

    aggregate_id: AggregateId
    sequence: int
    body: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "aggregate_id", normalize_aggregate_id(self.aggregate_id)
        )
        _require_sequence(self.sequence)
        _require_body(self.body)

    def is_fresh_for(self, min_sequence: int) -> bool:
        """Return True if this snapshot covers at least `min_sequence`."""
        return self.sequence >= min_sequence

    def as_row(self) -> dict[str, Any]:
        """Return the snapshot as an insertable ``snapshots`` row."""
        return {
            "aggregate_id": self.aggregate_id,
            "sequence": self.sequence,
            "body": self.body,
        }


@dataclass(frozen=True, slots=True)
class EventBatch:
    """A single-aggregate, atomic commit batch.

    Invariants enforced:
      - At least one event.
      - All events share the same `aggregate_id`.
      - Sequences are pairwise distinct within the batch.

    Sequences need not be contiguous; gap policy belongs to the caller.
    """

    aggregate_id: AggregateId
    events: Sequence[Event]

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "aggregate_id", normalize_aggregate_id(self.aggregate_id)
        )
        if not self.events:
            raise InvalidRecordError("Empty batch is not allowed.")

        for event in self.events:
            if not isinstance(event, Event):
                raise InvalidRecordError(
                    f"Batch items must be Event instances, got {type(event).__name__}."
                )
            if event.aggregate_id != self.aggregate_id:
                raise InvalidRecordError("Mixed aggregates in a single batch.")

        sequences = self.sequences
        if len(sequences) != len(set(sequences)):
            raise InvalidRecordError("Duplicate sequence within batch.")

    @property
    def sequences(self) -> tuple[int, ...]:
        """The sequences claimed by this batch, in input order."""
        return tuple(event.sequence for event in self.events)

    @classmethod
    def from_events(cls, events: Event | Iterable[Event]) -> EventBatch:
        """Create a batch from one event or an iterable of events.

        Args:
            events: A single `Event` or any iterable of `Event` objects.

        Raises:
            InvalidRecordError: If the batch is empty or violates batch invariants.

        Returns:
            An EventBatch containing the provided events in input order.
        """
        items = [events] if isinstance(events, Event) else list(events)
        if not items:
            raise InvalidRecordError("Empty batch is not allowed.")
        first = items[0]
        if not isinstance(first, Event):
            raise InvalidRecordError(
                f"Batch items must be Event instances, got {type(first).__name__}."
            )
        return cls(aggregate_id=first.aggregate_id, events=tuple(items))
