from typing import Optional

from backend.app.core.settings import get_settings
from backend.app.core.store import JsonFileStore, RecordStore

# Process-wide store, created on first use so importing the app has no side effects
_store: Optional[RecordStore] = None


def get_record_store() -> RecordStore:
    global _store
    if _store is None:
        _store = JsonFileStore(get_settings().DATA_DIR)
    return _store
