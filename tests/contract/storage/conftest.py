"""Pytest fixtures for StorageAdapter contract tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from aggstore.adapters.storage import InMemoryStorageAdapter, SqlAlchemyStorageAdapter
from aggstore.interfaces.storage_adapter import StorageAdapter
from aggstore.service_layer.store import Store

# pylint: disable=redefined-outer-name

#: Every backend the contract runs against.
BACKENDS = ["memory", "sqlite_memory", "sqlite_file", "postgres"]

#: Backends safe to hit from several threads at once.
CONCURRENT_BACKENDS = ["memory", "sqlite_file", "postgres"]

_ENGINE_FIXTURES = {
    "sqlite_memory": "sqlite_engine_memory",
    "sqlite_file": "sqlite_engine_file",
    "postgres": "postgres_engine",
}


def _build_adapter(request: pytest.FixtureRequest, backend: str) -> StorageAdapter:
    """Construct a fresh adapter for `backend`, pulling engines from fixtures."""
    if backend == "memory":  # pylint: disable=magic-value-comparison
        return InMemoryStorageAdapter()
    try:
        engine_fixture = _ENGINE_FIXTURES[backend]
    except KeyError as e:
        raise ValueError(f"unknown backend: {backend}") from e
    return SqlAlchemyStorageAdapter(request.getfixturevalue(engine_fixture))


@pytest.fixture(params=BACKENDS)
def adapter(request: pytest.FixtureRequest) -> StorageAdapter:
    """A fresh storage adapter for each backend in BACKENDS."""
    return _build_adapter(request, request.param)


@pytest.fixture
def store(adapter: StorageAdapter) -> Store:
    """A Store facade over the parametrized adapter."""
    return Store(adapter)


@pytest.fixture(params=CONCURRENT_BACKENDS)
def concurrent_store(request: pytest.FixtureRequest) -> Store:
    """A Store over a backend that is shared correctly between threads."""
    return Store(_build_adapter(request, request.param))


@pytest.fixture
def store_factory(request: pytest.FixtureRequest) -> Callable[[str], Store]:
    """Return a builder for stores on a named backend (for Hypothesis tests)."""

    def _make(backend: str) -> Store:
        return Store(_build_adapter(request, backend))

    return _make
