"""Persistence of citation state across sessions.

- CitationStore: typed accessors with default substitution on bad data
- KeyValueBackend: backend protocol (duck typed, Redis compatible)
- InMemoryBackend, JsonFileBackend: bundled backends
"""

from citesync.storage.backends import InMemoryBackend, JsonFileBackend, KeyValueBackend
from citesync.storage.store import CitationStore


__all__ = [
    "CitationStore",
    "InMemoryBackend",
    "JsonFileBackend",
    "KeyValueBackend",
]
