"""Build a Store with the configured storage adapter."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from types import MappingProxyType

from aggstore.adapters.db.engine import make_engine
from aggstore.adapters.storage import InMemoryStorageAdapter, SqlAlchemyStorageAdapter
from aggstore.config import DB_URL_ENV_VAR, StoreSettings
from aggstore.interfaces.storage_adapter import StorageAdapter
from aggstore.service_layer.store import Store

logger = logging.getLogger(__name__)


class UnknownStorageAdapterError(LookupError):
    """Raised when the configured adapter name is not registered."""

    def __init__(self, name: str, known: list[str]) -> None:
        super().__init__(
            f"Unknown storage adapter {name!r}; expected one of {sorted(known)}."
        )
        self.name = name


class MissingDatabaseUrlError(ValueError):
    """Raised when a database-backed adapter is built without a URL."""


class DefaultStoreAlreadyConfiguredError(RuntimeError):
    """Raised when the process-wide default store is configured twice."""


class DefaultStoreNotConfiguredError(RuntimeError):
    """Raised when the process-wide default store is used before configuration."""


def _build_sqlalchemy_adapter(settings: StoreSettings) -> StorageAdapter:
    if not settings.db_url:
        raise MissingDatabaseUrlError(
            f"The 'sqlalchemy' storage adapter needs {DB_URL_ENV_VAR} to be set."
        )
    return SqlAlchemyStorageAdapter(make_engine(settings.db_url))


def _build_memory_adapter(settings: StoreSettings) -> StorageAdapter:  # pylint: disable=unused-argument
    return InMemoryStorageAdapter()


#: Adapter factories by registry name. Add a variant here; `Store` never changes.
ADAPTER_FACTORIES: Mapping[str, Callable[[StoreSettings], StorageAdapter]] = (
    MappingProxyType(
        {
            SqlAlchemyStorageAdapter.name: _build_sqlalchemy_adapter,
            InMemoryStorageAdapter.name: _build_memory_adapter,
        }
    )
)


def build_storage_adapter(settings: StoreSettings) -> StorageAdapter:
    """Instantiate the storage adapter named by `settings.adapter`.

    Raises:
        UnknownStorageAdapterError: if the name is not registered.
        MissingDatabaseUrlError: if a database-backed adapter has no URL.
    """
    try:
        factory = ADAPTER_FACTORIES[settings.adapter]
    except KeyError as e:
        raise UnknownStorageAdapterError(
            settings.adapter, list(ADAPTER_FACTORIES)
        ) from e
    adapter = factory(settings)
    logger.debug("Built storage adapter %s", type(adapter).__name__)
    return adapter


def build_store(settings: StoreSettings | None = None) -> Store:
    """Build a Store wired to the configured adapter.

    Args:
        settings: Explicit settings; read from the environment when omitted.
    """
    settings = settings if settings is not None else StoreSettings.from_env()
    return Store(build_storage_adapter(settings))


# --------------------------------------------------------------------------- #
# Process-wide default store
# --------------------------------------------------------------------------- #
# Set once at startup, read-only afterwards. Code that can take a Store as an
# argument should do so instead of reaching for the default.

_default_store: Store | None = None
_default_store_lock = threading.Lock()


def configure_default_store(store: Store) -> Store:
    """Install `store` as the process-wide default. May be called only once.

    Raises:
        DefaultStoreAlreadyConfiguredError: if a default is already installed.
    """
    global _default_store  # pylint: disable=global-statement
    with _default_store_lock:
        if _default_store is not None:
            raise DefaultStoreAlreadyConfiguredError(
                "The default store is already configured."
            )
        _default_store = store
    logger.info("Default store configured: %r", store)
    return store


def default_store() -> Store:
    """Return the process-wide default store.

    Raises:
        DefaultStoreNotConfiguredError: if `configure_default_store` was never called.
    """
    if (store := _default_store) is None:
        raise DefaultStoreNotConfiguredError(
            "Call configure_default_store() at startup before using the default store."
        )
    return store


def _reset_default_store() -> None:
    """Forget the default store. Test helper only."""
    global _default_store  # pylint: disable=global-statement
    with _default_store_lock:
        _default_store = None
