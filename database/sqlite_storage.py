import json
from typing import Any, Dict, Mapping, Optional

import aiosqlite
from aiogram.fsm.state import State
from aiogram.fsm.storage.base import BaseStorage, StateType, StorageKey

from database.models import (
    ALL_TABLES, DELETE_EMPTY, SELECT_DATA, SELECT_STATE, UPSERT_DATA, UPSERT_STATE,
)


def build_key(key: StorageKey) -> str:
    """Строковый ключ записи: бот, чат, пользователь, тред, назначение"""
    parts = [key.bot_id, key.chat_id, key.user_id, key.thread_id or "", key.destiny]
    return ":".join(str(part) for part in parts)


class SQLiteStorage(BaseStorage):
    """Хранилище FSM в файле SQLite"""

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def init_db(self):
        """Инициализация базы данных"""
        async with aiosqlite.connect(self.db_path) as db:
            for table_query in ALL_TABLES:
                await db.execute(table_query)
            await db.commit()

    async def set_state(self, key: StorageKey, state: StateType = None) -> None:
        value = state.state if isinstance(state, State) else state
        storage_key = build_key(key)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(UPSERT_STATE, (storage_key, value))
            await db.execute(DELETE_EMPTY, (storage_key,))
            await db.commit()

    async def get_state(self, key: StorageKey) -> Optional[str]:
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(SELECT_STATE, (build_key(key),)) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else None

    async def set_data(self, key: StorageKey, data: Mapping[str, Any]) -> None:
        storage_key = build_key(key)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(UPSERT_DATA, (storage_key, json.dumps(dict(data), ensure_ascii=False)))
            await db.execute(DELETE_EMPTY, (storage_key,))
            await db.commit()

    async def get_data(self, key: StorageKey) -> Dict[str, Any]:
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(SELECT_DATA, (build_key(key),)) as cursor:
                row = await cursor.fetchone()
        if not row or not row[0]:
            return {}
        return json.loads(row[0])

    async def close(self) -> None:
        # Соединения открываются на каждый запрос
        pass
