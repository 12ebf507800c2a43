import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from catalog.exceptions import CatalogLoadError, UnknownTraining
from catalog.models import Training, trainings_from_json
from keyboards.callbacks import ChangeLoad, SelectExercise, FinishExercise, SelectTraining

logger = logging.getLogger(__name__)

# Каталог, встроенный в пакет
DEFAULT_CATALOG_PATH = Path(__file__).with_name("workout.json")


class Catalog:
    """Неизменяемый каталог тренировок, загружается один раз при старте"""

    def __init__(self, trainings: Iterable[Training]):
        self._trainings: Tuple[Training, ...] = tuple(trainings)
        self._by_id: Dict[str, Training] = {t.identifier: t for t in self._trainings}

    @property
    def trainings(self) -> Tuple[Training, ...]:
        return self._trainings

    def lookup(self, identifier: str) -> Training:
        """Найти тренировку по идентификатору"""
        try:
            return self._by_id[identifier]
        except KeyError:
            raise UnknownTraining(identifier) from None

    def snapshot(self) -> Dict[str, Training]:
        """Копия каталога для сессии, в порядке каталога"""
        return dict(self._by_id)

    def __len__(self) -> int:
        return len(self._trainings)

    def __iter__(self):
        return iter(self._trainings)


def _check_payloads(training: Training):
    """Все кнопки тренировки должны упаковываться в callback_data"""
    try:
        SelectTraining(training_id=training.identifier).pack()
        FinishExercise(training_id=training.identifier).pack()
        for exercise in training.exercises:
            SelectExercise(training_id=training.identifier, exercise_name=exercise.name).pack()
            ChangeLoad(training_id=training.identifier, exercise_name=exercise.name).pack()
    except ValueError as e:
        raise CatalogLoadError(f"Training {training.identifier!r} can not be used in buttons: {e}") from e


def parse_catalog(raw: str) -> Catalog:
    """Разбор каталога из JSON-строки"""
    trainings = trainings_from_json(raw)
    for training in trainings:
        _check_payloads(training)

    return Catalog(trainings)


def load_catalog(path: Optional[Union[str, Path]] = None) -> Catalog:
    """
    Загрузить каталог тренировок из файла

    Args:
        path: путь к JSON-файлу, по умолчанию встроенный workout.json

    Returns:
        Catalog

    Raises:
        CatalogLoadError: файл не найден, не JSON или данные некорректны
    """
    path = Path(path) if path else DEFAULT_CATALOG_PATH

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogLoadError(f"Can not read catalog {path}: {e}") from e

    catalog = parse_catalog(raw)
    logger.info("Каталог загружен: %s (тренировок: %d)", path, len(catalog))
    return catalog
