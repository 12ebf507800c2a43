import logging

from aiogram import Router
from aiogram.filters import ExceptionTypeFilter
from aiogram.types import ErrorEvent

from database.session_store import SessionStoreError

router = Router()
logger = logging.getLogger(__name__)


@router.error(ExceptionTypeFilter(SessionStoreError))
async def session_store_error(event: ErrorEvent):
    """Сбой хранилища сессий: апдейт считается необработанным"""
    logger.error(
        "Апдейт %s не обработан: %s",
        event.update.update_id,
        event.exception,
        exc_info=event.exception,
    )
