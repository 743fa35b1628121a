"""Adapters (infrastructure) for aggstore.

Concrete implementations of the `StorageAdapter` port (SQLAlchemy-backed and
in-memory), plus persistence mapping and wiring (engines, metadata, migrations).

Dependency rule: may import `aggstore.interfaces`; the interfaces must not
import this package.
"""
