from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TextCommand:
    """Текстовое сообщение; command - имя команды без "/" или "" если не команда"""
    chat_id: int
    command: str
    raw_text: Optional[str] = None


@dataclass(frozen=True)
class CallbackEvent:
    """Нажатие inline-кнопки"""
    chat_id: int
    callback_id: str
    payload: Optional[str]
