"""Storage adapter port for the aggregate store.

A `StorageAdapter` is the pluggable backend behind `Store`. Exactly one is
active per process; it is chosen at configuration time and injected into the
facade, which never names a concrete class.

Contract overview
-----------------
commit_events:
- Persist every event of the batch in **one** atomic unit.
- The backend's uniqueness guarantee on `(aggregate_id, sequence)` is the only
  conflict detector. Adapters must not check for existing rows and then insert.
- A collision returns `CommitOutcome.CONFLICT` and persists nothing.
- Any other failure raises `TransportError`.

get_events:
- Events with `sequence > after_sequence`, ascending by `sequence`.
- Empty list when nothing matches. `after_sequence < 0` raises `ValueError`.

commit_snapshot:
- Compare-and-replace: write iff there is no snapshot for the aggregate or
  the stored `sequence` is strictly lower. Equal or lower incoming sequences
  are silently ignored. Atomic with respect to concurrent writers.

get_snapshot:
- The stored snapshot iff its `sequence >= min_sequence`, else None.
  `min_sequence < 0` raises `ValueError`.

Persisted layout (logical):
- `events`: unique on `(aggregate_id, sequence)`, range-scannable by it.
- `snapshots`: one row per `aggregate_id`, with the `sequence` used for
  the compare-and-replace rule.
"""

import abc
from collections.abc import Sequence
from enum import Enum

from .records import Event, EventBatch, Snapshot


class CommitOutcome(Enum):
    """Result of an adapter-level event commit."""

    COMMITTED = "committed"
    CONFLICT = "conflict"


def check_after_sequence(after_sequence: int) -> None:
    """Validate the lower bound of an event tail read."""
    if after_sequence < 0:
        raise ValueError("after_sequence must be >= 0")


def check_min_sequence(min_sequence: int) -> None:
    """Validate the freshness bound of a snapshot read."""
    if min_sequence < 0:
        raise ValueError("min_sequence must be >= 0")


class StorageAdapter(abc.ABC):
    """An abstract base class for an aggregate store backend."""

    #: Registry name of the variant (e.g. ``"sqlalchemy"``, ``"memory"``).
    name: str

    @abc.abstractmethod
    def commit_events(self, batch: EventBatch) -> CommitOutcome:
        """Persist the batch atomically.

        Args:
            batch: A validated single-aggregate batch.

        Returns:
            `CommitOutcome.COMMITTED` if every event was persisted, or
            `CommitOutcome.CONFLICT` if any `(aggregate_id, sequence)` already
            existed (in which case nothing was persisted).

        Raises:
            TransportError: for any failure other than a sequence collision.
        """

    @abc.abstractmethod
    def get_events(self, aggregate_id: str, after_sequence: int) -> Sequence[Event]:
        """Return the aggregate's events after `after_sequence`, ascending.

        Args:
            aggregate_id: The aggregate to read.
            after_sequence: Exclusive lower bound on `sequence`.

        Returns:
            The matching events ordered by `sequence`. Empty if none match.

        Raises:
            ValueError: if after_sequence < 0.
            TransportError: if the backend cannot be read.
        """

    @abc.abstractmethod
    def commit_snapshot(self, snapshot: Snapshot) -> None:
        """Store `snapshot` unless an equal-or-newer one already exists.

        Raises:
            TransportError: if the backend cannot be written.
        """

    @abc.abstractmethod
    def get_snapshot(self, aggregate_id: str, min_sequence: int) -> Snapshot | None:
        """Return the stored snapshot if it is fresh enough, else None.

        Args:
            aggregate_id: The aggregate to look up.
            min_sequence: The snapshot must cover at least this sequence.

        Raises:
            ValueError: if min_sequence < 0.
            TransportError: if the backend cannot be read.
        """
