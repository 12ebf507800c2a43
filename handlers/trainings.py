from aiogram import Bot, Router
from aiogram.types import CallbackQuery

from states.events import CallbackEvent
from states.machine import ConversationMachine
from utils.messenger import BotMessenger

router = Router()


@router.callback_query()
async def training_callback(callback: CallbackQuery, machine: ConversationMachine, bot: Bot):
    """Все кнопки разбирает ConversationMachine"""
    # Сообщение могло быть удалено, тогда чат - это сам пользователь
    chat_id = callback.message.chat.id if callback.message else callback.from_user.id
    event = CallbackEvent(chat_id=chat_id, callback_id=callback.id, payload=callback.data)
    await machine.handle_callback(event, BotMessenger(bot))
