"""In-process store backed by a dict."""

from __future__ import annotations

from typing import Mapping, Optional

from riotauth.store.base import KeyValueStore


class MemoryStore(KeyValueStore):
    """Keeps items in memory only.  Useful for tests and embedding.

    Args:
        initial: Optional items to pre-populate the store with.
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    async def has_item(self, key: str) -> bool:
        return key in self._items

    async def set_items(self, items: Mapping[str, str]) -> None:
        self._items.update(items)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of everything stored."""
        return dict(self._items)
