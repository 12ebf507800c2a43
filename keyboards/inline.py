from typing import Iterable

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from catalog.models import Training
from keyboards.callbacks import ChangeLoad, SelectExercise, FinishExercise, SelectTraining

CHANGE_LOAD_TEXT = "Change Load"
COMPLETED_TEXT = "Completed!"


def trainings_kb(trainings: Iterable[Training]) -> InlineKeyboardMarkup:
    """Список тренировок, по одной в ряд"""
    keyboard = []

    for training in trainings:
        keyboard.append([
            InlineKeyboardButton(
                text=training.identifier,
                callback_data=SelectTraining(training_id=training.identifier).pack()
            )
        ])

    return InlineKeyboardMarkup(inline_keyboard=keyboard)


def training_kb(training: Training) -> InlineKeyboardMarkup:
    """Упражнения тренировки: просмотр и изменение нагрузки, в конце "Completed!" """
    keyboard = []

    for exercise in training.exercises:
        keyboard.append([
            InlineKeyboardButton(
                text=exercise.name,
                callback_data=SelectExercise(
                    training_id=training.identifier, exercise_name=exercise.name
                ).pack()
            ),
            InlineKeyboardButton(
                text=CHANGE_LOAD_TEXT,
                callback_data=ChangeLoad(
                    training_id=training.identifier, exercise_name=exercise.name
                ).pack()
            ),
        ])

    keyboard.append([
        InlineKeyboardButton(
            text=COMPLETED_TEXT,
            callback_data=FinishExercise(training_id=training.identifier).pack()
        )
    ])

    return InlineKeyboardMarkup(inline_keyboard=keyboard)
