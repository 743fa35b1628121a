"""Storage adapter implementations.

- `SqlAlchemyStorageAdapter`: durable, PostgreSQL or SQLite through SQLAlchemy.
- `InMemoryStorageAdapter`: non-durable, for tests and prototyping.

Both implement `aggstore.interfaces.StorageAdapter` and pass the same
contract tests.
"""

from .memory_adapter import InMemoryStorageAdapter
from .sqlalchemy_adapter import SqlAlchemyStorageAdapter

__all__ = ["InMemoryStorageAdapter", "SqlAlchemyStorageAdapter"]
