"""Service layer for aggstore.

Hosts the `Store` facade, the one object callers talk to. It depends only on
`aggstore.interfaces`; concrete adapters are handed to it by
`aggstore.bootstrap`.
"""

from .store import Store

__all__ = ["Store"]
