"""Transport implementations for zkclient.

Supported transports:
- kazoo (real ensembles, requires the ``kazoo`` extra)
- memory (in-process store, for testing and development)
"""

from .base import BaseTransport, Completion, TransportError, TransportFactory, WatchCallback
from .kazoo import KazooTransport
from .memory import InMemoryStore, InMemoryTransport

# Register transports
TransportFactory.register("kazoo", KazooTransport)
TransportFactory.register("memory", InMemoryTransport)

__all__ = [
    "BaseTransport",
    "Completion",
    "TransportError",
    "TransportFactory",
    "WatchCallback",
    "KazooTransport",
    "InMemoryStore",
    "InMemoryTransport",
]
