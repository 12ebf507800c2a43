from aiogram import Bot, Router, F
from aiogram.types import Message
from aiogram.filters import CommandStart, Command, CommandObject

from states.events import TextCommand
from states.machine import ConversationMachine
from utils.messenger import BotMessenger

router = Router()


@router.message(CommandStart())
async def cmd_start(message: Message, machine: ConversationMachine, bot: Bot):
    """Команда /start"""
    event = TextCommand(chat_id=message.chat.id, command='start', raw_text=message.text)
    await machine.handle_command(event, BotMessenger(bot))


@router.message(Command("help", "cancel"))
async def cmd_help_or_cancel(message: Message, command: CommandObject,
                             machine: ConversationMachine, bot: Bot):
    """Команды /help и /cancel"""
    event = TextCommand(chat_id=message.chat.id, command=command.command, raw_text=message.text)
    await machine.handle_command(event, BotMessenger(bot))


@router.message(F.text)
async def unknown_message(message: Message, machine: ConversationMachine, bot: Bot):
    """Любой другой текст - неизвестная команда; сообщения без текста игнорируются"""
    event = TextCommand(chat_id=message.chat.id, command='', raw_text=message.text)
    await machine.handle_command(event, BotMessenger(bot))
