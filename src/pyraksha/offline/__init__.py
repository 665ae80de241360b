"""Offline-first write path: durable queue, connectivity and replay."""

from pyraksha.offline.connectivity import ConnectivityMonitor, ConnectivityState, ConnectivityTransition
from pyraksha.offline.queue import MutationQueue
from pyraksha.offline.replay import DrainOutcome, ReplayEngine
from pyraksha.offline.storage import JsonFileStore, KeyValueStore, MemoryStore, SnapshotStore

__all__ = [
    "ConnectivityMonitor",
    "ConnectivityState",
    "ConnectivityTransition",
    "DrainOutcome",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "MutationQueue",
    "ReplayEngine",
    "SnapshotStore",
]
