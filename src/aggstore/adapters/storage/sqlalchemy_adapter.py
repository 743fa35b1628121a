"""SQLAlchemy-backed storage adapter for aggstore.

Durable implementation of the `StorageAdapter` port over the ``events`` and
``snapshots`` tables (see adapters.storage.schema), for PostgreSQL and SQLite.

Each operation runs in its own transaction on a connection checked out from
the injected Engine:

- `commit_events` issues one multi-row INSERT. The UNIQUE(aggregate_id,
  sequence) constraint decides conflicts; the transaction rolls back as a
  whole when it fires, so a batch is never partially applied.
- `commit_snapshot` issues one ``INSERT ... ON CONFLICT (aggregate_id) DO
  UPDATE ... WHERE snapshots.sequence < excluded.sequence``, so racing
  writers converge on the highest sequence without application locks.

Error mapping:
    IntegrityError on ``uq_events_aggregate_id_sequence`` -> CommitOutcome.CONFLICT
    any other StatementError (integrity, data, operational, bind-time
    serialization, ...) -> TransportError
    TypeError/ValueError from a driver encoding parameters -> TransportError
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, StatementError

from aggstore.adapters.db.dialects import DialectName, upsert_for
from aggstore.interfaces.errors import TransportError
from aggstore.interfaces.records import Event, EventBatch, Snapshot
from aggstore.interfaces.storage_adapter import (
    CommitOutcome,
    StorageAdapter,
    check_after_sequence,
    check_min_sequence,
)

from .schema import SEQUENCE_UNIQUE_CONSTRAINT, events, snapshots

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.sql.dml import Insert

logger = logging.getLogger(__name__)

# PostgreSQL reports the constraint name; SQLite reports the column list.
SEQUENCE_CONFLICT_MARKERS = (
    SEQUENCE_UNIQUE_CONSTRAINT,
    "events.aggregate_id, events.sequence",
)  # pragma: no mutate

EMPTY_STRING = ""  # pragma: no mutate

# StatementError covers every DBAPIError and SQLAlchemy's own bind failures;
# drivers that encode JSON themselves (psycopg) raise TypeError/ValueError.
BACKEND_ERRORS = (StatementError, TypeError, ValueError)

EVENT_COLUMNS = (
    events.c.aggregate_id,
    events.c.sequence,
    events.c.timestamp,
    events.c.type,
    events.c.body,
)


class SqlAlchemyStorageAdapter(StorageAdapter):
    """SQLAlchemy-backed StorageAdapter.

    Args:
        engine: Engine built by `aggstore.adapters.db.engine.make_engine`.
    """

    name = "sqlalchemy"

    def __init__(self, engine: Engine):
        self.engine = engine
        self.dialect = DialectName.from_sqlalchemy(engine)

    # --------------------------------------------------------------------- #
    # Event log
    # --------------------------------------------------------------------- #

    def commit_events(self, batch: EventBatch) -> CommitOutcome:
        rows = [event.as_row() for event in batch.events]
        try:
            with self.engine.begin() as conn:
                conn.execute(insert(events), rows)
        except IntegrityError as e:
            if self._is_sequence_conflict(e):
                logger.debug(
                    "Sequence conflict on aggregate %s for sequences %s",
                    batch.aggregate_id,
                    list(batch.sequences),
                )
                return CommitOutcome.CONFLICT
            raise TransportError(self._message(e)) from e
        except BACKEND_ERRORS as e:
            raise TransportError(self._message(e)) from e
        return CommitOutcome.COMMITTED

    def get_events(self, aggregate_id: str, after_sequence: int) -> Sequence[Event]:
        check_after_sequence(after_sequence)
        stmt = (
            select(*EVENT_COLUMNS)
            .where(events.c.aggregate_id == aggregate_id)
            .where(events.c.sequence > after_sequence)
            .order_by(events.c.sequence.asc())
        )
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except BACKEND_ERRORS as e:
            raise TransportError(self._message(e)) from e
        return [Event(**row) for row in rows]

    # --------------------------------------------------------------------- #
    # Snapshot cache
    # --------------------------------------------------------------------- #

    def commit_snapshot(self, snapshot: Snapshot) -> None:
        stmt = self._build_replace_if_newer(snapshot)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
        except BACKEND_ERRORS as e:
            raise TransportError(self._message(e)) from e
        if result.rowcount == 0:  # pragma: no mutate
            logger.debug(
                "Snapshot for %s at sequence %s not newer than stored; kept existing",
                snapshot.aggregate_id,
                snapshot.sequence,
            )

    def get_snapshot(self, aggregate_id: str, min_sequence: int) -> Snapshot | None:
        check_min_sequence(min_sequence)
        stmt = select(
            snapshots.c.aggregate_id, snapshots.c.sequence, snapshots.c.body
        ).where(
            snapshots.c.aggregate_id == aggregate_id,
            snapshots.c.sequence >= min_sequence,
        )
        try:
            with self.engine.connect() as conn:
                row = conn.execute(stmt).mappings().one_or_none()
        except BACKEND_ERRORS as e:
            raise TransportError(self._message(e)) from e
        if row is None:
            return None
        return Snapshot(**row)

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    def _build_replace_if_newer(self, snapshot: Snapshot) -> Insert:
        """Build the single-statement compare-and-replace upsert for `snapshot`."""
        stmt = upsert_for(self.dialect, snapshots).values(**snapshot.as_row())
        return stmt.on_conflict_do_update(
            index_elements=[snapshots.c.aggregate_id],
            set_={
                "sequence": stmt.excluded.sequence,
                "body": stmt.excluded.body,
            },
            where=snapshots.c.sequence < stmt.excluded.sequence,
        )

    @staticmethod
    def _message(error: Exception) -> str:
        """Prefer the driver's message over SQLAlchemy's wrapper text."""
        orig = getattr(error, "orig", None)
        if orig not in (None, EMPTY_STRING):
            return str(orig)
        return str(error)

    @classmethod
    def _is_sequence_conflict(cls, integrity_error: IntegrityError) -> bool:
        """Return True if the error is the UNIQUE(aggregate_id, sequence) violation.

        Other integrity failures (CHECK constraints, NOT NULL, ...) are not
        conflicts and are surfaced as transport errors by the caller.
        """
        msg = cls._message(integrity_error)
        return any(marker in msg for marker in SEQUENCE_CONFLICT_MARKERS)
