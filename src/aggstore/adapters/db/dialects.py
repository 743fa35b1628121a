"""Database dialect handling for aggstore.

Centralizes the supported dialect names so checks such as "is this SQLite?"
stay type-safe, and provides the dialect-specific ``INSERT`` constructs the
snapshot compare-and-replace statement needs (``ON CONFLICT ... DO UPDATE``
exists only on the PostgreSQL and SQLite dialect inserts).
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

if TYPE_CHECKING:
    from sqlalchemy import Table
    from sqlalchemy.dialects.postgresql import Insert as PgInsert
    from sqlalchemy.dialects.sqlite import Insert as SqliteInsert
    from sqlalchemy.engine import Connection, Engine


class UnsupportedDialect(Exception):
    """Raised when an unsupported database dialect is encountered."""


class DialectName(str, Enum):
    """Supported SQLAlchemy dialect names.

    Attributes:
        POSTGRES: PostgreSQL dialect (``"postgresql"``).
        SQLITE:   SQLite dialect (``"sqlite"``).
    """

    POSTGRES = "postgresql"
    SQLITE = "sqlite"

    @classmethod
    def from_string(cls, dialect_str: str) -> DialectName:
        """Normalize an arbitrary dialect string to a DialectName.

        Accepts common aliases and driver-qualified names (e.g. 'postgres',
        'postgresql+psycopg', 'sqlite+pysqlite').

        Raises:
            UnsupportedDialect: if the dialect is not recognized.
        """
        raw = (dialect_str or "").strip().lower()
        base = raw.split("+", 1)[0]

        if base in {"postgres", "postgresql", "pg"}:
            return cls.POSTGRES
        if base in {"sqlite"}:
            return cls.SQLITE

        raise UnsupportedDialect(f"Unsupported dialect: {dialect_str!r}")

    @classmethod
    def from_sqlalchemy(cls, obj: Engine | Connection) -> DialectName:
        """Extract the dialect from a SQLAlchemy Engine or Connection.

        Raises:
            UnsupportedDialect: if the object has no dialect or it is not supported.
        """
        try:
            name = obj.dialect.name
        except AttributeError as e:
            raise UnsupportedDialect(
                f"Object {type(obj).__name__} does not expose .dialect.name"
            ) from e
        return cls.from_string(name)


def upsert_for(dialect: DialectName, table: Table) -> PgInsert | SqliteInsert:
    """Return the dialect-specific INSERT construct supporting ON CONFLICT.

    Args:
        dialect: The target dialect.
        table: The table to insert into.

    Raises:
        UnsupportedDialect: for dialects without an ON CONFLICT clause.
    """
    if dialect is DialectName.POSTGRES:
        return pg_insert(table)
    if dialect is DialectName.SQLITE:
        return sqlite_insert(table)
    raise UnsupportedDialect(f"Unsupported dialect: {dialect!r}")  # pragma: no cover
