"""aggstore

An event-sourced aggregate store: an append-only log of domain events keyed by
aggregate identity and sequence number, plus a snapshot cache used to speed up
aggregate rehydration. Conflicting commits are rejected with a retry signal so
callers can recompute their command against fresh state.
"""

from aggstore.interfaces.errors import ConflictError, StoreError, TransportError
from aggstore.interfaces.records import Event, Snapshot
from aggstore.service_layer.store import Store

__all__ = [
    "__version__",
    "ConflictError",
    "Event",
    "Snapshot",
    "Store",
    "StoreError",
    "TransportError",
]
__version__ = "0.1.0"
