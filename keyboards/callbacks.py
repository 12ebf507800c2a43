"""
Данные кнопок (callback_data)

Формат: поля через ":", первое поле - тег действия:
    T:<тренировка>                 - выбор тренировки
    E:<тренировка>:<упражнение>    - просмотр упражнения
    CL:<тренировка>:<упражнение>   - изменить нагрузку (не реализовано)
    FE:<тренировка>                - тренировка завершена (не реализовано)

Идентификаторы не экранируются: ":" внутри названия даёт лишнее поле,
и такой payload отклоняется как MalformedCallback.
"""
from enum import Enum
from typing import ClassVar, Dict, Optional, Type, Union

from aiogram.filters.callback_data import CallbackData
from pydantic import Field

SEPARATOR = ":"


class Action(str, Enum):
    SELECT_TRAINING = "T"
    SELECT_EXERCISE = "E"
    CHANGE_LOAD = "CL"
    FINISH_EXERCISE = "FE"


class MalformedCallback(ValueError):
    """Не удалось разобрать callback_data"""

    def __init__(self, payload: Optional[str], reason: str):
        super().__init__(f"Malformed callback {payload!r}: {reason}")
        self.payload = payload
        self.reason = reason


class SelectTraining(CallbackData, prefix=Action.SELECT_TRAINING.value, sep=SEPARATOR):
    action: ClassVar[Action] = Action.SELECT_TRAINING
    training_id: str = Field(min_length=1)


class SelectExercise(CallbackData, prefix=Action.SELECT_EXERCISE.value, sep=SEPARATOR):
    action: ClassVar[Action] = Action.SELECT_EXERCISE
    training_id: str = Field(min_length=1)
    exercise_name: str = Field(min_length=1)


class ChangeLoad(CallbackData, prefix=Action.CHANGE_LOAD.value, sep=SEPARATOR):
    action: ClassVar[Action] = Action.CHANGE_LOAD
    training_id: str = Field(min_length=1)
    exercise_name: str = Field(min_length=1)


class FinishExercise(CallbackData, prefix=Action.FINISH_EXERCISE.value, sep=SEPARATOR):
    action: ClassVar[Action] = Action.FINISH_EXERCISE
    training_id: str = Field(min_length=1)


CallbackAction = Union[SelectTraining, SelectExercise, ChangeLoad, FinishExercise]

ACTIONS: Dict[Action, Type[CallbackData]] = {
    Action.SELECT_TRAINING: SelectTraining,
    Action.SELECT_EXERCISE: SelectExercise,
    Action.CHANGE_LOAD: ChangeLoad,
    Action.FINISH_EXERCISE: FinishExercise,
}


def encode(action: CallbackAction) -> str:
    """Упаковать действие в callback_data"""
    return action.pack()


def decode(payload: Optional[str]) -> CallbackAction:
    """
    Разобрать callback_data в действие

    Raises:
        MalformedCallback: пустой payload, неизвестный тег, не то число полей или пустое поле
    """
    if not payload:
        raise MalformedCallback(payload, "empty payload")

    tag = payload.split(SEPARATOR, 1)[0]
    try:
        action_cls = ACTIONS[Action(tag)]
    except ValueError:
        raise MalformedCallback(payload, f"unknown tag {tag!r}") from None

    try:
        return action_cls.unpack(payload)
    except (TypeError, ValueError) as e:
        # TypeError - не то число полей, ValueError - ошибка валидации pydantic
        raise MalformedCallback(payload, str(e)) from e
