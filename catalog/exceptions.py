class CatalogLoadError(Exception):
    """Каталог тренировок не удалось загрузить"""


class UnknownTraining(LookupError):
    """Тренировка не найдена"""

    def __init__(self, training_id: str):
        super().__init__(f"Unknown training: {training_id!r}")
        self.training_id = training_id


class UnknownExercise(LookupError):
    """Упражнение не найдено в тренировке"""

    def __init__(self, training_id: str, exercise_name: str):
        super().__init__(f"Unknown exercise {exercise_name!r} in training {training_id!r}")
        self.training_id = training_id
        self.exercise_name = exercise_name
