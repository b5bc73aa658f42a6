"""Abstract key-value persistence handle.

The token lifecycle only needs a tiny async surface over string keys:
``get_item``, ``set_item``, ``remove_item`` and ``has_item``.  Backends
implement those four; :meth:`KeyValueStore.set_items` writes a group of
keys and should be overridden by backends that can do it atomically.

See Also:
    :class:`~riotauth.store.memory.MemoryStore`
    :class:`~riotauth.store.file.JsonFileStore`
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Optional


class KeyValueStore(ABC):
    """Async string-keyed persistence used to survive process restarts."""

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """Return the value stored under *key*, or ``None`` when absent."""
        ...

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""
        ...

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Delete *key*.  Removing a missing key is a no-op."""
        ...

    @abstractmethod
    async def has_item(self, key: str) -> bool:
        """Return ``True`` if *key* is present."""
        ...

    async def set_items(self, items: Mapping[str, str]) -> None:
        """Store several keys as one group.

        The default implementation writes the keys one after another and
        gives no atomicity guarantee.  Backends that can replace the whole
        group in a single operation override this.
        """
        for key, value in items.items():
            await self.set_item(key, value)

    async def remove_items(self, keys: list[str]) -> None:
        """Delete several keys."""
        for key in keys:
            await self.remove_item(key)
