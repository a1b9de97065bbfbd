"""
Record store: four named collections (users, referrals, withdraws,
transactions), each loaded and saved as a whole ordered list of records.

There is no index and no partial update. Callers doing read-modify-write
must hold `lock()` on every collection they touch; the lock only
serialises requests inside one process.
"""
import asyncio
import copy
import json
import os
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Union

from backend.app.core.constants import COLLECTIONS
from backend.app.core.exceptions import StoreError

RecordList = list[dict[str, Any]]


class RecordStore(ABC):
    """Whole-collection load/save contract with per-collection mutual exclusion."""

    def __init__(self):
        self._locks = {name: asyncio.Lock() for name in COLLECTIONS}

    @staticmethod
    def _check_collection(collection: str) -> None:
        if collection not in COLLECTIONS:
            raise StoreError(f"Unknown collection: {collection}")

    @abstractmethod
    async def load(self, collection: str) -> RecordList:
        """Return every record of the collection in insertion order."""

    @abstractmethod
    async def save(self, collection: str, records: RecordList) -> None:
        """Replace the collection with `records`."""

    @asynccontextmanager
    async def lock(self, *collections: str) -> AsyncIterator[None]:
        """
        Hold the locks of the given collections.

        Locks are always taken in COLLECTIONS order, so two callers
        locking overlapping sets cannot deadlock.
        """
        for name in collections:
            self._check_collection(name)
        ordered = [name for name in COLLECTIONS if name in collections]
        acquired: list[asyncio.Lock] = []
        try:
            for name in ordered:
                lock = self._locks[name]
                await lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


class JsonFileStore(RecordStore):
    """One pretty-printed JSON array file per collection under `data_dir`."""

    def __init__(self, data_dir: Union[str, Path]):
        super().__init__()
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for name in COLLECTIONS:
            path = self._path(name)
            if not path.exists():
                path.write_text("[]", encoding="utf-8")

    def _path(self, collection: str) -> Path:
        self._check_collection(collection)
        return self.data_dir / f"{collection}.json"

    @staticmethod
    def _read(path: Path) -> RecordList:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt collection file {path}: {e}") from e
        if not isinstance(data, list):
            raise StoreError(f"Collection file {path} does not hold a JSON array")
        return data

    @staticmethod
    def _write(path: Path, records: RecordList) -> None:
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, path)

    async def load(self, collection: str) -> RecordList:
        return await asyncio.to_thread(self._read, self._path(collection))

    async def save(self, collection: str, records: RecordList) -> None:
        await asyncio.to_thread(self._write, self._path(collection), list(records))


class MemoryStore(RecordStore):
    """In-process store with the same copy semantics as the file store."""

    def __init__(self):
        super().__init__()
        self._data: dict[str, RecordList] = {name: [] for name in COLLECTIONS}

    async def load(self, collection: str) -> RecordList:
        self._check_collection(collection)
        return copy.deepcopy(self._data[collection])

    async def save(self, collection: str, records: RecordList) -> None:
        self._check_collection(collection)
        self._data[collection] = copy.deepcopy(list(records))
