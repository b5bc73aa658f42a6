"""Persistence backends for the session record.

- :class:`KeyValueStore` -- the async interface the token lifecycle uses.
- :class:`MemoryStore` -- dict-backed, process-local.
- :class:`JsonFileStore` -- single JSON file, atomic group writes.
"""

from riotauth.store.base import KeyValueStore
from riotauth.store.file import JsonFileStore
from riotauth.store.memory import MemoryStore

__all__ = ["JsonFileStore", "KeyValueStore", "MemoryStore"]
