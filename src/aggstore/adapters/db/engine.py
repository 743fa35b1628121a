"""Database engine factory.

Every Engine used by aggstore comes from `make_engine` so connections are
configured the same way everywhere:

- **SQLite**: PRAGMAs for WAL journaling, a busy timeout so concurrent
  writers wait for the write lock instead of failing immediately, and
  relaxed-but-safe durability.
- **PostgreSQL**: no tuning; the default READ COMMITTED isolation is enough
  because conflicts are arbitrated by unique constraints.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, make_url

if TYPE_CHECKING:
    from sqlite3 import Connection as SQLiteConnection

    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

SQLITE_NAMES = {"sqlite", "sqlite+pysqlite"}

#: Milliseconds a SQLite connection waits on a locked database before failing.
SQLITE_BUSY_TIMEOUT_MS = 5000


def is_sqlite(url: str | URL) -> bool:
    """Return True if the given SQLAlchemy URL or string targets SQLite."""
    u = make_url(str(url))
    return u.get_backend_name() in SQLITE_NAMES


def make_engine(url: str | URL, *, echo: bool = False) -> Engine:
    """Create a SQLAlchemy Engine for the given URL.

    For SQLite, applies on every new DB-API connection:
        - ``foreign_keys=ON``
        - ``journal_mode=WAL`` (readers don't block the writer)
        - ``synchronous=NORMAL``
        - ``busy_timeout=SQLITE_BUSY_TIMEOUT_MS``

    Args:
        url: Database connection URL (str or :class:`URL`).
        echo: If True, log SQL statements.

    Returns:
        Engine: Configured SQLAlchemy Engine.
    """

    engine = create_engine(url, echo=echo)
    logger.debug("Created engine for backend %s", engine.dialect.name)

    if is_sqlite(url):

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn: SQLiteConnection, conn_record):  # type: ignore # pylint: disable=W0613
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute("PRAGMA synchronous=NORMAL;")
            cur.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS};")
            cur.close()

    return engine
