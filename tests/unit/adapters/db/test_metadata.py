"""Tests for the constraint names the metadata naming convention produces.

The SQLAlchemy adapter recognizes a sequence conflict by the name
``uq_events_aggregate_id_sequence``, so the names on the store's tables are
locked down here. On SQLite, UNIQUE constraints may reflect as unique
indexes, so either form is accepted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect

from aggstore.adapters.storage.schema import SEQUENCE_UNIQUE_CONSTRAINT, events

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_sequence_unique_constraint_name_in_metadata():
    """The table definition carries the conventional unique name."""
    names = {c.name for c in events.constraints}
    assert SEQUENCE_UNIQUE_CONSTRAINT in names
    assert "pk_events" in names  # pylint: disable=magic-value-comparison
    assert "ck_events_positive_sequence" in names  # pylint: disable=magic-value-comparison


@pytest.mark.parametrize(
    "engine", ["sqlite_engine_memory", "sqlite_engine_file"], indirect=True
)
def test_unique_constraint_is_named_in_database(engine: Engine):
    """create_all() and the migration produce the same unique name."""
    inspector = inspect(engine)
    idx = {ix["name"] for ix in inspector.get_indexes("events")}
    uq_names = {uc.get("name") for uc in inspector.get_unique_constraints("events")}

    assert SEQUENCE_UNIQUE_CONSTRAINT in idx | uq_names


@pytest.mark.parametrize(
    "engine", ["sqlite_engine_memory", "sqlite_engine_file"], indirect=True
)
def test_check_constraints_are_named_in_database(engine: Engine):
    """Both tables carry their positive-sequence CHECK under the conventional name."""
    inspector = inspect(engine)
    for table in ("events", "snapshots"):
        names = {c.get("name") for c in inspector.get_check_constraints(table)}
        assert f"ck_{table}_positive_sequence" in names
