"""Unit tests for database dialect handling."""

import pytest
from sqlalchemy.dialects import postgresql, sqlite

from aggstore.adapters.db.dialects import DialectName, UnsupportedDialect, upsert_for
from aggstore.adapters.storage.schema import snapshots

# pylint: disable=too-few-public-methods


@pytest.mark.parametrize(
    "input_str,expected",
    [
        ("postgresql", DialectName.POSTGRES),
        ("postgres", DialectName.POSTGRES),
        ("pg", DialectName.POSTGRES),
        ("postgresql+psycopg", DialectName.POSTGRES),
        ("sqlite", DialectName.SQLITE),
        ("sqlite+pysqlite", DialectName.SQLITE),
        ("  SQLite  ", DialectName.SQLITE),
    ],
)
def test_from_string_aliases(input_str, expected):
    """Dialect aliases and driver-qualified names map to a DialectName."""
    assert DialectName.from_string(input_str) is expected


@pytest.mark.parametrize("bad", [None, "", "  ", "mysql", "duckdb"])
def test_from_string_rejects_unsupported(bad):
    """Unsupported or empty dialect strings raise UnsupportedDialect."""
    with pytest.raises(UnsupportedDialect):
        DialectName.from_string(bad)


def test_from_sqlalchemy_accepts_engine_like_objects():
    """Anything exposing .dialect.name is accepted."""

    class FakeDialect:
        """A fake dialect with a name attribute."""

        name = "postgresql"

    class FakeEngine:
        """A fake engine exposing a dialect attribute."""

        dialect = FakeDialect()

    assert DialectName.from_sqlalchemy(FakeEngine()) is DialectName.POSTGRES  # type: ignore[arg-type]


def test_from_sqlalchemy_raises_when_missing_attribute():
    """Objects without .dialect.name raise UnsupportedDialect."""

    class NotAnEngine:
        """A class that does not have a dialect attribute."""

    with pytest.raises(UnsupportedDialect):
        DialectName.from_sqlalchemy(NotAnEngine())  # type: ignore[arg-type]


def test_from_sqlalchemy_on_real_engine(sqlite_engine_memory):
    """A real SQLite engine is recognized."""
    assert DialectName.from_sqlalchemy(sqlite_engine_memory) is DialectName.SQLITE


@pytest.mark.parametrize(
    ("dialect", "sa_dialect"),
    [
        (DialectName.POSTGRES, postgresql.dialect()),
        (DialectName.SQLITE, sqlite.dialect()),
    ],
)
def test_upsert_for_compiles_on_conflict(dialect, sa_dialect):
    """The returned INSERT supports ON CONFLICT ... DO UPDATE ... WHERE."""
    stmt = upsert_for(dialect, snapshots).values(aggregate_id="A", sequence=2, body={})
    stmt = stmt.on_conflict_do_update(
        index_elements=[snapshots.c.aggregate_id],
        set_={"sequence": stmt.excluded.sequence},
        where=snapshots.c.sequence < stmt.excluded.sequence,
    )

    sql = str(stmt.compile(dialect=sa_dialect)).upper()

    assert "ON CONFLICT (AGGREGATE_ID) DO UPDATE" in sql
    assert "WHERE SNAPSHOTS.SEQUENCE < EXCLUDED.SEQUENCE" in sql
