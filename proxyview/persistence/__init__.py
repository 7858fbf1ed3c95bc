"""Device storage and remote preference persistence."""

from .preferences import PreferenceCache
from .storage import JsonFileStore, KeyValueStore, MemoryStore
from .sync import PersistenceSync

__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "PersistenceSync",
    "PreferenceCache",
]
