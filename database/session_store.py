import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import aiosqlite
from aiogram.fsm.storage.base import BaseStorage, StorageKey
from aiogram.fsm.storage.memory import SimpleEventIsolation

from states.training_states import ConversationState, Idle, InvalidStoredState, dump_state, load_state

logger = logging.getLogger(__name__)

# Ошибки хранилища, которые отдаём наружу как SessionStoreError
STORAGE_ERRORS = (aiosqlite.Error, OSError, json.JSONDecodeError, InvalidStoredState)


class SessionStoreError(Exception):
    """Не удалось прочитать или записать сессию чата"""

    def __init__(self, chat_id: int, message: str):
        super().__init__(f"Session store failure for chat {chat_id}: {message}")
        self.chat_id = chat_id


class SessionStore:
    """
    Состояние диалога по chat_id поверх хранилища FSM aiogram

    Чтение-изменение-запись одного чата выполняется под lock(chat_id),
    разные чаты друг друга не блокируют.
    """

    def __init__(self, storage: BaseStorage, bot_id: int):
        self.storage = storage
        self.bot_id = bot_id
        self._isolation = SimpleEventIsolation()

    def key(self, chat_id: int) -> StorageKey:
        return StorageKey(bot_id=self.bot_id, chat_id=chat_id, user_id=chat_id)

    @asynccontextmanager
    async def lock(self, chat_id: int) -> AsyncIterator[None]:
        async with self._isolation.lock(self.key(chat_id)):
            yield

    async def get(self, chat_id: int) -> ConversationState:
        """Текущее состояние чата, Idle если записи нет"""
        key = self.key(chat_id)
        try:
            state_name = await self.storage.get_state(key)
            if state_name is None:
                return Idle()
            data = await self.storage.get_data(key)
            return load_state(state_name, data)
        except STORAGE_ERRORS as e:
            raise SessionStoreError(chat_id, str(e)) from e

    async def set(self, chat_id: int, state: ConversationState):
        """Сохранить состояние; Idle стирает запись"""
        if isinstance(state, Idle):
            await self.erase(chat_id)
            return

        key = self.key(chat_id)
        state_name, data = dump_state(state)
        try:
            await self.storage.set_data(key, data)
            await self.storage.set_state(key, state_name)
        except STORAGE_ERRORS as e:
            raise SessionStoreError(chat_id, str(e)) from e
        logger.debug("Чат %s: состояние %s", chat_id, state_name)

    async def erase(self, chat_id: int):
        key = self.key(chat_id)
        try:
            await self.storage.set_state(key, None)
            await self.storage.set_data(key, {})
        except STORAGE_ERRORS as e:
            raise SessionStoreError(chat_id, str(e)) from e
        logger.debug("Чат %s: сессия сброшена", chat_id)

    async def close(self):
        await self.storage.close()
