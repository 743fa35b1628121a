"""Create events and snapshots tables

Revision ID: 3f1c9a7d2b64
Revises:
Create Date: 2026-10-17

"""

# pylint: disable=invalid-name

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from aggstore.adapters.db.sa_types import BIGINT_PK, PORTABLE_JSON, UTCDateTime

# pylint: disable=no-member

# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2b64"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    dialect = bind.dialect.name

    op.create_table(
        "events",
        sa.Column(
            "id",
            BIGINT_PK,
            sa.Identity(always=False, start=1),
            nullable=False,
            comment="Surrogate key; insertion order across all aggregates.",
        ),
        sa.Column(
            "aggregate_id",
            sa.String(length=200),
            nullable=False,
            comment="Opaque aggregate identifier.",
        ),
        sa.Column(
            "sequence",
            sa.Integer(),
            nullable=False,
            comment="Per-aggregate position (starts at 1); used for optimistic concurrency.",
        ),
        sa.Column(
            "timestamp",
            UTCDateTime(),
            nullable=False,
            comment="Caller-supplied event time (UTC).",
        ),
        sa.Column(
            "type",
            sa.String(length=200),
            nullable=False,
            comment="Semantic kind of the event.",
        ),
        sa.Column(
            "body",
            PORTABLE_JSON,
            nullable=False,
            comment="Event payload (JSON object).",
        ),
        sa.CheckConstraint("sequence >= 1", name=op.f("ck_events_positive_sequence")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_events")),
        sa.UniqueConstraint(
            "aggregate_id", "sequence", name=op.f("uq_events_aggregate_id_sequence")
        ),
        comment="Append-only event log. One row per domain event.",
    )

    op.create_table(
        "snapshots",
        sa.Column(
            "aggregate_id",
            sa.String(length=200),
            nullable=False,
            comment="Opaque aggregate identifier; one snapshot per aggregate.",
        ),
        sa.Column(
            "sequence",
            sa.Integer(),
            nullable=False,
            comment="Sequence through which the body reflects applied events.",
        ),
        sa.Column(
            "body",
            PORTABLE_JSON,
            nullable=False,
            comment="Materialized aggregate state (JSON object).",
        ),
        sa.CheckConstraint(
            "sequence >= 1", name=op.f("ck_snapshots_positive_sequence")
        ),
        sa.PrimaryKeyConstraint("aggregate_id", name=op.f("pk_snapshots")),
        comment="Latest snapshot per aggregate.",
    )

    # ---- APPEND-ONLY ENFORCEMENT ----
    if dialect == "postgresql":  # pylint: disable=magic-value-comparison
        op.execute(
            """
            CREATE OR REPLACE FUNCTION events_forbid_mod() RETURNS trigger
            LANGUAGE plpgsql AS $$
            BEGIN
              RAISE EXCEPTION 'events is append-only; % not allowed', TG_OP
              USING ERRCODE = '0A000'; -- feature_not_supported
            END;
            $$;
            """
        )
        op.execute(
            """
            CREATE TRIGGER tr_events_append_only
            BEFORE UPDATE OR DELETE ON events
            FOR EACH ROW
            EXECUTE FUNCTION events_forbid_mod();
            """
        )
    else:
        op.execute(
            """
            CREATE TRIGGER tr_events_no_update
            BEFORE UPDATE ON events
            BEGIN
              SELECT RAISE(ABORT, 'events is append-only; UPDATE not allowed');
            END;
            """
        )
        op.execute(
            """
            CREATE TRIGGER tr_events_no_delete
            BEFORE DELETE ON events
            BEGIN
              SELECT RAISE(ABORT, 'events is append-only; DELETE not allowed');
            END;
            """
        )


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    dialect = bind.dialect.name

    if dialect == "postgresql":  # pylint: disable=magic-value-comparison
        op.execute("DROP TRIGGER IF EXISTS tr_events_append_only ON events;")
        op.execute("DROP FUNCTION IF EXISTS events_forbid_mod();")
    else:
        op.execute("DROP TRIGGER IF EXISTS tr_events_no_delete;")
        op.execute("DROP TRIGGER IF EXISTS tr_events_no_update;")

    op.drop_table("snapshots")
    op.drop_table("events")
