import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.base import BaseStorage
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import BotCommand

import config
from catalog.exceptions import CatalogLoadError
from catalog.loader import load_catalog
from database.session_store import SessionStore
from database.sqlite_storage import SQLiteStorage
from states.machine import ConversationMachine

# Импортируем роутеры
from handlers import start, trainings, errors

# Настройка логирования
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stdout
)
logger = logging.getLogger(__name__)


async def create_storage() -> BaseStorage:
    """Хранилище сессий по настройке STORAGE"""
    if config.STORAGE == 'memory':
        logger.info("Сессии хранятся в памяти")
        return MemoryStorage()

    storage = SQLiteStorage(config.DB_PATH)
    await storage.init_db()
    logger.info("База сессий инициализирована: %s", config.DB_PATH)
    return storage


def create_dispatcher(machine: ConversationMachine) -> Dispatcher:
    """Диспетчер с роутерами; machine доступна хендлерам как аргумент"""
    dp = Dispatcher(machine=machine)

    # Регистрируем роутеры
    dp.include_router(errors.router)
    dp.include_router(start.router)
    dp.include_router(trainings.router)

    return dp


async def main():
    """Главная функция запуска бота"""

    # Проверяем наличие токена
    if not config.BOT_TOKEN:
        logger.error("BOT_TOKEN не найден! Создай файл .env с токеном бота.")
        return

    # Без корректного каталога бот не запускается
    catalog = load_catalog(config.CATALOG_PATH)

    # Инициализируем бота
    bot = Bot(token=config.BOT_TOKEN)

    sessions = SessionStore(await create_storage(), bot_id=bot.id)
    dp = create_dispatcher(ConversationMachine(catalog, sessions))

    await bot.set_my_commands([
        BotCommand(command=name, description=description)
        for name, description in config.COMMANDS.items()
    ])

    logger.info("Бот запущен!")

    try:
        # Запускаем polling
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await sessions.close()
        await bot.session.close()
        logger.info("Бот остановлен")


if __name__ == '__main__':
    try:
        asyncio.run(main())
    except CatalogLoadError as e:
        logger.critical("Каталог тренировок не загружен: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Бот остановлен пользователем")
