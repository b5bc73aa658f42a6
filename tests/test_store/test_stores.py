"""Tests for the key-value store backends."""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path

import pytest

from riotauth.exceptions import StoreError
from riotauth.store import JsonFileStore, MemoryStore


@pytest.fixture()
def file_store(tmp_path: Path) -> JsonFileStore:
    return JsonFileStore(tmp_path / "session.json")


class TestMemoryStore:
    @pytest.mark.asyncio
    async def test_set_get_has(self) -> None:
        store = MemoryStore()
        assert await store.has_item("token") is False
        await store.set_item("token", "abc")
        assert await store.has_item("token") is True
        assert await store.get_item("token") == "abc"

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self) -> None:
        assert await MemoryStore().get_item("nope") is None

    @pytest.mark.asyncio
    async def test_remove_missing_is_noop(self) -> None:
        store = MemoryStore({"a": "1"})
        await store.remove_item("b")
        assert store.snapshot() == {"a": "1"}

    @pytest.mark.asyncio
    async def test_group_operations(self) -> None:
        store = MemoryStore({"keep": "x"})
        await store.set_items({"a": "1", "b": "2"})
        assert store.snapshot() == {"keep": "x", "a": "1", "b": "2"}
        await store.remove_items(["a", "b", "c"])
        assert store.snapshot() == {"keep": "x"}

    def test_initial_is_copied(self) -> None:
        initial = {"a": "1"}
        store = MemoryStore(initial)
        initial["a"] = "2"
        assert store.snapshot() == {"a": "1"}


class TestJsonFileStore:
    @pytest.mark.asyncio
    async def test_missing_file_reads_empty(self, file_store: JsonFileStore) -> None:
        assert file_store.exists() is False
        assert await file_store.has_item("token") is False
        assert await file_store.get_item("token") is None

    @pytest.mark.asyncio
    async def test_set_and_get(self, file_store: JsonFileStore) -> None:
        await file_store.set_item("token", "abc")
        assert file_store.exists() is True
        assert await file_store.get_item("token") == "abc"
        data = json.loads(file_store.path.read_text(encoding="utf-8"))
        assert data == {"token": "abc"}

    @pytest.mark.asyncio
    async def test_file_permissions(self, file_store: JsonFileStore) -> None:
        await file_store.set_item("token", "secret")
        mode = stat.S_IMODE(os.stat(file_store.path).st_mode)
        assert mode == 0o600

    @pytest.mark.asyncio
    async def test_set_items_writes_group(self, file_store: JsonFileStore) -> None:
        await file_store.set_item("other", "keep")
        await file_store.set_items({"expiresAt": "1", "token": "t", "puuid": "u"})
        data = json.loads(file_store.path.read_text(encoding="utf-8"))
        assert data == {"other": "keep", "expiresAt": "1", "token": "t", "puuid": "u"}

    @pytest.mark.asyncio
    async def test_remove_items(self, file_store: JsonFileStore) -> None:
        await file_store.set_items({"a": "1", "b": "2", "c": "3"})
        await file_store.remove_items(["a", "b", "missing"])
        assert await file_store.has_item("a") is False
        assert await file_store.get_item("c") == "3"

    @pytest.mark.asyncio
    async def test_remove_missing_key(self, file_store: JsonFileStore) -> None:
        await file_store.remove_item("nothing")
        assert await file_store.get_item("nothing") is None

    @pytest.mark.asyncio
    async def test_corrupt_file_reads_empty(self, file_store: JsonFileStore) -> None:
        file_store.path.write_text("{not json", encoding="utf-8")
        assert await file_store.get_item("token") is None
        await file_store.set_item("token", "fresh")
        assert await file_store.get_item("token") == "fresh"

    @pytest.mark.asyncio
    async def test_non_object_file_reads_empty(self, file_store: JsonFileStore) -> None:
        file_store.path.write_text("[1, 2]", encoding="utf-8")
        assert await file_store.has_item("token") is False

    @pytest.mark.asyncio
    async def test_survives_reopen(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "session.json"
        await JsonFileStore(path).set_item("token", "abc")
        assert await JsonFileStore(path).get_item("token") == "abc"

    @pytest.mark.asyncio
    async def test_write_failure_raises_store_error(
        self, file_store: JsonFileStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _boom(*args: object, **kwargs: object) -> None:
            raise OSError("read-only file system")

        monkeypatch.setattr("riotauth.store.file.atomic_write", _boom)
        with pytest.raises(StoreError, match="read-only"):
            await file_store.set_item("token", "abc")

    def test_default_path_uses_data_dir(self, isolated_config: Path) -> None:
        store = JsonFileStore()
        assert store.path == isolated_config / "data" / "riotauth" / "session.json"
