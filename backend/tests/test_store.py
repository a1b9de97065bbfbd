"""
Tests for the record store.

Tests cover:
- JSON file layout and first-run initialisation
- Whole-collection load/save ordering
- Corrupt and unknown collections
- Copy semantics of the in-memory store
- Per-collection locking of read-modify-write cycles
"""
import asyncio
import json

import pytest

from backend.app.core.constants import COLLECTIONS, TRANSACTIONS, USERS
from backend.app.core.exceptions import StoreError
from backend.app.core.store import JsonFileStore, MemoryStore


def test_json_store_creates_empty_collection_files(tmp_path):
    data_dir = tmp_path / "db"
    JsonFileStore(data_dir)

    for name in COLLECTIONS:
        path = data_dir / f"{name}.json"
        assert path.exists()
        assert json.loads(path.read_text(encoding="utf-8")) == []


def test_json_store_keeps_existing_files(tmp_path):
    (tmp_path / "users.json").write_text('[{"id": "u_1"}]', encoding="utf-8")
    JsonFileStore(tmp_path)

    assert json.loads((tmp_path / "users.json").read_text(encoding="utf-8")) == [{"id": "u_1"}]


@pytest.mark.asyncio
async def test_json_store_round_trip_preserves_order(tmp_path):
    store = JsonFileStore(tmp_path)
    records = [{"id": "u_b"}, {"id": "u_a"}, {"id": "u_c"}]

    await store.save(USERS, records)

    assert await store.load(USERS) == records
    assert not list(tmp_path.glob("*.tmp"))


@pytest.mark.asyncio
async def test_json_store_empty_file_reads_as_empty(tmp_path):
    store = JsonFileStore(tmp_path)
    (tmp_path / "users.json").write_text("", encoding="utf-8")

    assert await store.load(USERS) == []


@pytest.mark.asyncio
async def test_json_store_corrupt_file_raises(tmp_path):
    store = JsonFileStore(tmp_path)
    (tmp_path / "users.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(StoreError):
        await store.load(USERS)


@pytest.mark.asyncio
async def test_json_store_non_array_raises(tmp_path):
    store = JsonFileStore(tmp_path)
    (tmp_path / "users.json").write_text('{"id": "u_1"}', encoding="utf-8")

    with pytest.raises(StoreError):
        await store.load(USERS)


@pytest.mark.asyncio
async def test_unknown_collection_raises(tmp_path):
    for store in (JsonFileStore(tmp_path), MemoryStore()):
        with pytest.raises(StoreError):
            await store.load("orders")
        with pytest.raises(StoreError):
            await store.save("orders", [])


@pytest.mark.asyncio
async def test_memory_store_hands_out_copies():
    store = MemoryStore()
    records = [{"id": "u_1", "earnings": 0}]
    await store.save(USERS, records)

    records[0]["earnings"] = 99
    loaded = await store.load(USERS)
    loaded[0]["earnings"] = 50

    assert await store.load(USERS) == [{"id": "u_1", "earnings": 0}]


@pytest.mark.asyncio
async def test_lock_prevents_lost_updates():
    """Concurrent read-modify-write cycles under lock() all land."""
    store = MemoryStore()
    await store.save(TRANSACTIONS, [])

    async def append(i: int):
        async with store.lock(TRANSACTIONS):
            records = await store.load(TRANSACTIONS)
            await asyncio.sleep(0)  # yield mid-cycle
            records.append({"id": f"t_{i}"})
            await store.save(TRANSACTIONS, records)

    await asyncio.gather(*(append(i) for i in range(25)))

    assert len(await store.load(TRANSACTIONS)) == 25


@pytest.mark.asyncio
async def test_lock_overlapping_sets_does_not_deadlock():
    store = MemoryStore()

    async def worker(collections):
        for _ in range(5):
            async with store.lock(*collections):
                await asyncio.sleep(0)

    await asyncio.wait_for(
        asyncio.gather(
            worker((USERS, TRANSACTIONS)),
            worker((TRANSACTIONS, USERS)),
        ),
        timeout=5,
    )


@pytest.mark.asyncio
async def test_lock_rejects_unknown_collection():
    store = MemoryStore()
    with pytest.raises(StoreError):
        async with store.lock("orders"):
            pass
