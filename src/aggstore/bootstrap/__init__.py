"""Bootstrap (composition root) for aggstore.

Assembles the store at runtime: reads `StoreSettings`, picks the storage
adapter from the registry, and hands it to the `Store` facade. Optionally
installs a process-wide default store, once, at startup.

Import rules:
- Entry points import *this* package (not adapters/service_layer/interfaces).
- This package may import `aggstore.adapters`, `aggstore.service_layer`,
  `aggstore.interfaces`, and `aggstore.config`.
- Inner layers must not import `aggstore.bootstrap`.
"""

from .bootstrap import (
    ADAPTER_FACTORIES,
    DefaultStoreAlreadyConfiguredError,
    DefaultStoreNotConfiguredError,
    MissingDatabaseUrlError,
    UnknownStorageAdapterError,
    build_storage_adapter,
    build_store,
    configure_default_store,
    default_store,
)

__all__ = [
    "ADAPTER_FACTORIES",
    "DefaultStoreAlreadyConfiguredError",
    "DefaultStoreNotConfiguredError",
    "MissingDatabaseUrlError",
    "UnknownStorageAdapterError",
    "build_storage_adapter",
    "build_store",
    "configure_default_store",
    "default_store",
]
