"""Persistent store kept in a single JSON file.

Stores every key in one JSON object at
``~/.local/share/riotauth/session.json`` (XDG) or the platform-equivalent
directory.  Writes go through :func:`~riotauth.config.atomic_write` with
``0o600`` permissions so that tokens are never world-readable, even
momentarily, and a group write via :meth:`JsonFileStore.set_items`
replaces all keys in one rename.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Mapping, Optional

from riotauth.config import atomic_write, resolve_store_path
from riotauth.exceptions import StoreError
from riotauth.store.base import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):
    """Read/write string items in one JSON file.

    Args:
        path: File to use.  Defaults to :func:`~riotauth.config.resolve_store_path`.

    Example::

        store = JsonFileStore(tmp_path / "session.json")
        await store.set_item("token", "abc")
        assert await store.get_item("token") == "abc"
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path if path is not None else resolve_store_path()
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        """The filesystem path of the store file."""
        return self._path

    def _read(self) -> dict[str, str]:
        """Load all items.  A missing or corrupt file reads as empty."""
        if not self._path.is_file():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, ValueError, OSError) as exc:
            logger.warning("Ignoring unreadable store file %s: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store file %s: not a JSON object", self._path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, items: dict[str, str]) -> None:
        text = json.dumps(items, indent=2, sort_keys=True) + "\n"
        try:
            atomic_write(self._path, text, mode=0o600)
        except OSError as exc:
            raise StoreError(f"Cannot write store file {self._path}: {exc}") from exc

    async def _update(self, changes: Mapping[str, Optional[str]]) -> None:
        async with self._lock:
            items = await asyncio.to_thread(self._read)
            for key, value in changes.items():
                if value is None:
                    items.pop(key, None)
                else:
                    items[key] = value
            await asyncio.to_thread(self._write, items)

    async def get_item(self, key: str) -> Optional[str]:
        items = await asyncio.to_thread(self._read)
        return items.get(key)

    async def has_item(self, key: str) -> bool:
        items = await asyncio.to_thread(self._read)
        return key in items

    async def set_item(self, key: str, value: str) -> None:
        await self._update({key: value})

    async def remove_item(self, key: str) -> None:
        await self._update({key: None})

    async def set_items(self, items: Mapping[str, str]) -> None:
        await self._update(dict(items))

    async def remove_items(self, keys: list[str]) -> None:
        await self._update({key: None for key in keys})

    def exists(self) -> bool:
        """Return ``True`` if the store file is present on disk."""
        return self._path.is_file()
