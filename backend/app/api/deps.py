from backend.app.core.database import get_record_store
from backend.app.core.store import RecordStore


# Эта функция выдает хранилище записей для каждого запроса
async def get_store() -> RecordStore:
    return get_record_store()
