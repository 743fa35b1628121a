"""Aggregate store schema.

Two tables back the store:

``events``: the append-only log. One row per event.

| Constraint                          | Purpose                                  |
|-------------------------------------|------------------------------------------|
| UNIQUE(aggregate_id, sequence)      | optimistic concurrency; tail range scans |
| CHECK(sequence >= 1)                | sequences start at 1                     |

``snapshots``: the derived cache. One row per aggregate, replaced only by a
snapshot with a strictly greater ``sequence``.

| Constraint                          | Purpose                                  |
|-------------------------------------|------------------------------------------|
| PRIMARY KEY(aggregate_id)           | at most one snapshot per aggregate       |
| CHECK(sequence >= 1)                | sequences start at 1                     |

Append-only enforcement on ``events`` is installed by the migration (triggers),
so tables created with ``metadata.create_all()`` do not have it.
"""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    Identity,
    Integer,
    String,
    Table,
    UniqueConstraint,
)

from aggstore.adapters.db.metadata import metadata
from aggstore.adapters.db.sa_types import BIGINT_PK, PORTABLE_JSON, UTCDateTime

__all__ = ["events", "snapshots", "SEQUENCE_UNIQUE_CONSTRAINT"]

#: Name given to UNIQUE(aggregate_id, sequence) by the metadata naming convention.
SEQUENCE_UNIQUE_CONSTRAINT = "uq_events_aggregate_id_sequence"

AGGREGATE_ID_LENGTH = 200
EVENT_TYPE_LENGTH = 200

events = Table(
    "events",
    metadata,
    Column(
        "id",
        BIGINT_PK,
        Identity(start=1),
        nullable=False,
        primary_key=True,
        comment="Surrogate key; insertion order across all aggregates.",
    ),
    Column(
        "aggregate_id",
        String(AGGREGATE_ID_LENGTH),
        nullable=False,
        comment="Opaque aggregate identifier.",
    ),
    Column(
        "sequence",
        Integer,
        nullable=False,
        comment="Per-aggregate position (starts at 1); used for optimistic concurrency.",
    ),
    Column(
        "timestamp",
        UTCDateTime(),
        nullable=False,
        comment="Caller-supplied event time (UTC).",
    ),
    Column(
        "type",
        String(EVENT_TYPE_LENGTH),
        nullable=False,
        comment="Semantic kind of the event.",
    ),
    Column(
        "body",
        PORTABLE_JSON,
        nullable=False,
        comment="Event payload (JSON object).",
    ),
    UniqueConstraint("aggregate_id", "sequence"),
    CheckConstraint("sequence >= 1", name="positive_sequence"),
    comment="Append-only event log. One row per domain event.",
)

snapshots = Table(
    "snapshots",
    metadata,
    Column(
        "aggregate_id",
        String(AGGREGATE_ID_LENGTH),
        primary_key=True,
        nullable=False,
        comment="Opaque aggregate identifier; one snapshot per aggregate.",
    ),
    Column(
        "sequence",
        Integer,
        nullable=False,
        comment="Sequence through which the body reflects applied events.",
    ),
    Column(
        "body",
        PORTABLE_JSON,
        nullable=False,
        comment="Materialized aggregate state (JSON object).",
    ),
    CheckConstraint("sequence >= 1", name="positive_sequence"),
    comment="Latest snapshot per aggregate.",
)
