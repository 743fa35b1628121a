"""Configuration for aggstore.

Configuration is read from the environment once, at startup, into an immutable
`StoreSettings` value that is threaded through `aggstore.bootstrap`. Nothing in
the service layer or adapters reads the environment.

Environment variables:
    AGGSTORE_DB_URL:           SQLAlchemy URL (required by the ``sqlalchemy`` adapter).
    AGGSTORE_STORAGE_ADAPTER:  ``sqlalchemy`` (default) or ``memory``.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from importlib.resources import files
from typing import TextIO

from alembic.config import Config

DB_URL_ENV_VAR = "AGGSTORE_DB_URL"  # pragma: no mutate
STORAGE_ADAPTER_ENV_VAR = "AGGSTORE_STORAGE_ADAPTER"  # pragma: no mutate
DEFAULT_STORAGE_ADAPTER = "sqlalchemy"  # pragma: no mutate

ALEMBIC_URL_KEY = "sqlalchemy.url"  # pragma: no mutate
ALEMBIC_SCRIPT_LOCATION_KEY = "script_location"  # pragma: no mutate


class DatabaseUrlNotSetError(Exception):
    """Raised when the AGGSTORE_DB_URL environment variable is not set."""


def get_db_url() -> str:
    """Get the database URL from the environment.

    Raises:
        DatabaseUrlNotSetError: If `AGGSTORE_DB_URL` is not set or empty.
    """
    if not (url := os.environ.get(DB_URL_ENV_VAR)):
        raise DatabaseUrlNotSetError
    return url


def get_storage_adapter_name() -> str:
    """Get the configured storage adapter name (lower-cased), or the default."""
    name = os.environ.get(STORAGE_ADAPTER_ENV_VAR) or DEFAULT_STORAGE_ADAPTER
    return name.strip().lower()


@dataclass(frozen=True, slots=True)
class StoreSettings:
    """Process configuration for building a `Store`.

    Attributes:
        adapter: Registry name of the storage adapter to activate.
        db_url: SQLAlchemy URL; only needed by database-backed adapters.
    """

    adapter: str = DEFAULT_STORAGE_ADAPTER
    db_url: str | None = None

    @classmethod
    def from_env(cls) -> StoreSettings:
        """Build settings from ``AGGSTORE_*`` environment variables.

        The database URL is optional here; adapters that need it complain
        when they are built.
        """
        return cls(
            adapter=get_storage_adapter_name(),
            db_url=os.environ.get(DB_URL_ENV_VAR) or None,
        )


def build_alembic_config(
    db_url: str | None = None, stdout: TextIO = sys.stdout
) -> Config:
    """Build an Alembic `Config` for aggstore's packaged migrations.

    Sets only Alembic "main" options:
    - `sqlalchemy.url` → the database URL you pass
    - `script_location` → aggstore's packaged Alembic scripts

    Args:
        db_url: SQLAlchemy database URL. Can be `None` only where Alembic
            won't need to connect (e.g. `heads`, `history`).
        stdout: Text stream Alembic writes status lines to.

    Returns:
        An `alembic.config.Config` pointing at the packaged migration scripts.
    """
    cfg = Config(stdout=stdout)
    if db_url is not None:
        cfg.set_main_option(ALEMBIC_URL_KEY, db_url)
    cfg.set_main_option(
        ALEMBIC_SCRIPT_LOCATION_KEY,
        str(files("aggstore.adapters.db.alembic")),
    )
    return cfg
