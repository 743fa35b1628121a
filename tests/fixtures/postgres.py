"""PostgreSQL fixtures for aggstore.

PostgreSQL engines are backed by a temporary Postgres 17 instance launched with
Testcontainers and migrated to Alembic head.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

import docker
import pytest
from alembic import command
from sqlalchemy import text

from aggstore import config
from aggstore.adapters.db.engine import make_engine

try:
    from testcontainers.postgres import (
        PostgresContainer,  # pyright: ignore[reportMissingTypeStubs]
    )
except ImportError:  # pragma: no cover
    PostgresContainer = None  # pylint: disable=invalid-name

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

# pylint: disable=redefined-outer-name


# --- Auto-skip Docker/Testcontainers-backed tests when Docker daemon is unavailable ---


def _docker_available() -> bool:
    try:
        docker.from_env().ping()
    except Exception:  # pylint: disable=broad-except
        return False
    return True


DOCKER_UP = _docker_available()

PG_FIXTURES = ("postgres_engine", "pg_url")


def pytest_collection_modifyitems(items):
    """Skip Postgres/Testcontainers tests if Docker is unavailable."""
    if DOCKER_UP:
        return
    skip = pytest.mark.skip(reason="Docker/Testcontainers backend not available")
    for item in items:
        fixturenames = getattr(item, "fixturenames", ())
        if any(name in fixturenames for name in PG_FIXTURES):
            item.add_marker(skip)
        elif "postgres" in item.nodeid:  # pylint: disable=magic-value-comparison
            item.add_marker(skip)


# --- Engines ------------------------------------------------------------------


@pytest.fixture(scope="session")
def pg_url() -> Iterator[str]:
    """Session Postgres 17 container URL, migrated to Alembic head once.

    Normalizes the Testcontainers URL to `psycopg` (v3). The container is
    torn down at the end of the session.
    """
    if PostgresContainer is None:
        pytest.skip("testcontainers not installed")

    with PostgresContainer(
        image="postgres:17",
        username="aggstore",
        password="abc123",
        dbname="aggstore",
    ) as pg:
        # testcontainers returns psycopg2 URLs by default
        url = re.sub(r"\+psycopg2\b", "+psycopg", pg.get_connection_url())
        command.upgrade(config.build_alembic_config(url), "head")
        yield url


@pytest.fixture
def postgres_engine(pg_url: str) -> Iterator[Engine]:
    """Per-test Postgres engine bound to the session container.

    Truncates ``events`` and ``snapshots`` afterwards. TRUNCATE does not fire
    the row-level append-only trigger.
    """
    eng = make_engine(pg_url)
    try:
        yield eng
    finally:
        with eng.begin() as conn:
            conn.execute(
                text("TRUNCATE TABLE events, snapshots RESTART IDENTITY CASCADE")
            )
        eng.dispose()
