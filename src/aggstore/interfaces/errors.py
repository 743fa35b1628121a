"""Error taxonomy for the aggregate store.

Only two failure kinds ever reach a caller of `Store`:

- `ConflictError`: a sequence collision was detected at commit time. Expected
  and recoverable; the caller re-reads the aggregate, recomputes its events
  with fresh sequence numbers, and resubmits.
- `TransportError`: anything that went wrong below the store (connectivity,
  timeouts, constraint violations other than the sequence collision, bad data).
  Opaque and fatal from the store's point of view; never retried here.

`InvalidRecordError` is raised eagerly, before any I/O, when a record or batch
breaks its own invariants.

Not finding anything is not an error: empty event lists and missing snapshots
are normal results.
"""

from __future__ import annotations

from collections.abc import Sequence

RETRY_COMMAND = "retry_command"


class StoreError(Exception):
    """Base class for aggregate store errors."""


class ConflictError(StoreError):
    """Sequence collision on commit (optimistic concurrency).

    Attributes:
        aggregate_id (str): The aggregate whose commit was rejected.
        sequences (tuple[int, ...]): The sequences the rejected batch tried to claim.
        reason (str): Always ``"retry_command"``; the signal the caller acts on.
    """

    reason = RETRY_COMMAND

    def __init__(self, aggregate_id: str, sequences: Sequence[int]):
        self.aggregate_id = aggregate_id
        self.sequences = tuple(sequences)
        super().__init__(
            f"Sequence conflict for aggregate '{aggregate_id}' "
            f"(attempted sequences {list(self.sequences)}); retry the command."
        )


class TransportError(StoreError):
    """Failure below the store (connectivity, driver, constraint, data)."""


class InvalidRecordError(StoreError, ValueError):
    """An event, snapshot, or batch violates its invariants."""
