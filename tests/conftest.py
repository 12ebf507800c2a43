import asyncio

import pytest
from aiogram.fsm.storage.memory import MemoryStorage

from catalog.loader import Catalog
from catalog.models import ContinuousSeries, Exercise, RepetitionSeries, Training
from database.session_store import SessionStore, SessionStoreError
from states.machine import ConversationMachine


class FakeMessenger:
    """Запоминает исходящие сообщения и подтверждения кнопок"""

    def __init__(self):
        self.messages = []
        self.answered = []

    async def send_message(self, chat_id, text, reply_markup=None):
        self.messages.append((chat_id, text, reply_markup))

    async def answer_callback(self, callback_id):
        self.answered.append(callback_id)

    @property
    def texts(self):
        return [text for _, text, _ in self.messages]


class BrokenSessions:
    """Хранилище, которое всегда падает"""

    def __init__(self, real):
        self.real = real

    def lock(self, chat_id):
        return self.real.lock(chat_id)

    async def get(self, chat_id):
        raise SessionStoreError(chat_id, "disk is full")

    async def set(self, chat_id, state):
        raise SessionStoreError(chat_id, "disk is full")


def keyboard_payloads(markup):
    """Разметка -> [[(текст, callback_data), ...], ...]"""
    return [
        [(button.text, button.callback_data) for button in row]
        for row in markup.inline_keyboard
    ]


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def catalog():
    return Catalog([
        Training(identifier="A", exercises=(
            Exercise(name="Plank", series=ContinuousSeries(duration_seconds=30, sets=3)),
        )),
        Training(identifier="B", exercises=(
            Exercise(name="Free Weight Squat", series=RepetitionSeries(sets=4, repetitions=10)),
            Exercise(name="Leg Press", series=RepetitionSeries(sets=3, repetitions=12, load=37.5)),
        )),
    ])


@pytest.fixture
def sessions():
    return SessionStore(MemoryStorage(), bot_id=1)


@pytest.fixture
def machine(catalog, sessions):
    return ConversationMachine(catalog, sessions)


@pytest.fixture
def messenger():
    return FakeMessenger()
