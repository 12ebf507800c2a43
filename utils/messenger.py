from typing import Optional, Protocol

from aiogram import Bot
from aiogram.types import InlineKeyboardMarkup


class Messenger(Protocol):
    """Отправка ответов пользователю"""

    async def send_message(self, chat_id: int, text: str,
                           reply_markup: Optional[InlineKeyboardMarkup] = None) -> None:
        ...

    async def answer_callback(self, callback_id: str) -> None:
        ...


class BotMessenger:
    """Messenger поверх aiogram.Bot"""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_message(self, chat_id: int, text: str,
                           reply_markup: Optional[InlineKeyboardMarkup] = None) -> None:
        await self.bot.send_message(chat_id, text, reply_markup=reply_markup)

    async def answer_callback(self, callback_id: str) -> None:
        await self.bot.answer_callback_query(callback_id)
