import logging
from typing import Awaitable, Callable, Dict

from aiogram.exceptions import TelegramAPIError

import config
from catalog.exceptions import UnknownExercise, UnknownTraining
from catalog.loader import Catalog
from database.session_store import SessionStore
from keyboards.callbacks import Action, CallbackAction, MalformedCallback, decode
from keyboards.inline import trainings_kb, training_kb
from states.events import CallbackEvent, TextCommand
from states.training_states import BrowsingTrainings, ConversationState, Idle
from utils.formatters import format_exercise
from utils.messenger import Messenger

logger = logging.getLogger(__name__)

CHOOSE_TRAINING_TEXT = "Choose your training:"
CANCEL_TEXT = "Cancelling the dialogue."
COMMAND_NOT_FOUND_TEXT = "Command not found!"
SESSION_EXPIRED_TEXT = "Your session has expired. Send /start to choose a training."


def help_text() -> str:
    """Список команд из config.COMMANDS"""
    lines = ["These commands are supported:"]
    lines.extend(f"/{name} - {description}" for name, description in config.COMMANDS.items())
    return "\n".join(lines)


class ConversationMachine:
    """
    Диалог одного чата: Idle -> /start -> BrowsingTrainings

    Команды доступны в любом состоянии, кнопки обрабатываются только
    в BrowsingTrainings. Состояние читается и пишется под блокировкой чата.
    """

    def __init__(self, catalog: Catalog, sessions: SessionStore):
        self.catalog = catalog
        self.sessions = sessions

        self._command_handlers: Dict[str, Callable[..., Awaitable[ConversationState]]] = {
            'start': self._start,
            'help': self._help,
            'cancel': self._cancel,
        }
        self._callback_handlers: Dict[Action, Callable[..., Awaitable[None]]] = {
            Action.SELECT_TRAINING: self._select_training,
            Action.SELECT_EXERCISE: self._select_exercise,
            Action.CHANGE_LOAD: self._not_implemented,
            Action.FINISH_EXERCISE: self._not_implemented,
        }

    # ========== КОМАНДЫ ==========

    async def handle_command(self, event: TextCommand, messenger: Messenger) -> ConversationState:
        """Обработать текстовое сообщение, вернуть новое состояние чата"""
        handler = self._command_handlers.get(event.command, self._unknown_command)

        async with self.sessions.lock(event.chat_id):
            state = await self.sessions.get(event.chat_id)
            new_state = await handler(event, state, messenger)
            if new_state is not state:
                await self.sessions.set(event.chat_id, new_state)

        return new_state

    async def _start(self, event: TextCommand, state: ConversationState,
                     messenger: Messenger) -> ConversationState:
        # Каждый /start берёт свежую копию каталога
        new_state = BrowsingTrainings(snapshot=self.catalog.snapshot())
        await messenger.send_message(
            event.chat_id, CHOOSE_TRAINING_TEXT, reply_markup=trainings_kb(self.catalog.trainings)
        )
        logger.info("Чат %s: выбор тренировки", event.chat_id)
        return new_state

    async def _help(self, event: TextCommand, state: ConversationState,
                    messenger: Messenger) -> ConversationState:
        await messenger.send_message(event.chat_id, help_text())
        return state

    async def _cancel(self, event: TextCommand, state: ConversationState,
                      messenger: Messenger) -> ConversationState:
        await messenger.send_message(event.chat_id, CANCEL_TEXT)
        return Idle()

    async def _unknown_command(self, event: TextCommand, state: ConversationState,
                               messenger: Messenger) -> ConversationState:
        logger.debug("Чат %s: неизвестная команда %r", event.chat_id, event.raw_text)
        await messenger.send_message(event.chat_id, COMMAND_NOT_FOUND_TEXT)
        return state

    # ========== КНОПКИ ==========

    async def handle_callback(self, event: CallbackEvent, messenger: Messenger) -> ConversationState:
        """
        Обработать нажатие кнопки, вернуть состояние чата (кнопки его не меняют)

        Callback подтверждается ровно один раз на любой ветке, в том числе при ошибке.
        """
        try:
            return await self._process_callback(event, messenger)
        finally:
            await self._acknowledge(event, messenger)

    async def _acknowledge(self, event: CallbackEvent, messenger: Messenger):
        # Ошибка подтверждения не должна подменять исходную ошибку обработки
        try:
            await messenger.answer_callback(event.callback_id)
        except TelegramAPIError as e:
            logger.warning("Чат %s: не удалось подтвердить callback %s: %s",
                           event.chat_id, event.callback_id, e)

    async def _process_callback(self, event: CallbackEvent, messenger: Messenger) -> ConversationState:
        try:
            action = decode(event.payload)
        except MalformedCallback as e:
            logger.warning("Чат %s: %s", event.chat_id, e)
            async with self.sessions.lock(event.chat_id):
                return await self.sessions.get(event.chat_id)

        async with self.sessions.lock(event.chat_id):
            state = await self.sessions.get(event.chat_id)

            if not isinstance(state, BrowsingTrainings):
                await messenger.send_message(event.chat_id, SESSION_EXPIRED_TEXT)
                return state

            handler = self._callback_handlers[action.action]
            try:
                await handler(event.chat_id, state, action, messenger)
            except UnknownTraining as e:
                logger.info("Чат %s: %s", event.chat_id, e)
                await messenger.send_message(
                    event.chat_id,
                    f"Training {e.training_id} not found. Send /start to refresh the list."
                )
            except UnknownExercise as e:
                logger.info("Чат %s: %s", event.chat_id, e)
                await messenger.send_message(
                    event.chat_id,
                    f"Exercise {e.exercise_name} not found in training {e.training_id}."
                )

            return state

    async def _select_training(self, chat_id: int, state: BrowsingTrainings,
                               action: CallbackAction, messenger: Messenger):
        training = state.lookup(action.training_id)
        await messenger.send_message(
            chat_id,
            f"Exercises for training {training.identifier}",
            reply_markup=training_kb(training)
        )

    async def _select_exercise(self, chat_id: int, state: BrowsingTrainings,
                               action: CallbackAction, messenger: Messenger):
        # Упражнение ищем в текущем каталоге, а не в копии сессии
        training = self.catalog.lookup(action.training_id)
        exercise = training.find_exercise(action.exercise_name)
        await messenger.send_message(chat_id, format_exercise(exercise))

    async def _not_implemented(self, chat_id: int, state: BrowsingTrainings,
                               action: CallbackAction, messenger: Messenger):
        logger.debug("Чат %s: действие %s пока не поддерживается", chat_id, action.action.name)
