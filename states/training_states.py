from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from aiogram.fsm.state import State, StatesGroup

from catalog.exceptions import CatalogLoadError, UnknownTraining
from catalog.models import Training, trainings_from_records, trainings_to_records


class TrainingStates(StatesGroup):
    """Состояния диалога в хранилище FSM"""
    browsing = State()  # Пользователь выбирает тренировку/упражнение


@dataclass(frozen=True)
class Idle:
    """Начальное состояние: ничего не выбрано"""


@dataclass(frozen=True)
class BrowsingTrainings:
    """Просмотр тренировок; snapshot - копия каталога на момент /start"""
    snapshot: Dict[str, Training] = field(default_factory=dict)

    def lookup(self, training_id: str) -> Training:
        try:
            return self.snapshot[training_id]
        except KeyError:
            raise UnknownTraining(training_id) from None


ConversationState = Union[Idle, BrowsingTrainings]


class InvalidStoredState(ValueError):
    """Сохранённое состояние не удалось восстановить"""


def dump_state(state: ConversationState) -> Tuple[Optional[str], Dict[str, Any]]:
    """Состояние -> (имя состояния FSM, данные FSM)"""
    if isinstance(state, BrowsingTrainings):
        return TrainingStates.browsing.state, {
            "snapshot": trainings_to_records(state.snapshot.values())
        }
    return None, {}


def load_state(state_name: Optional[str], data: Dict[str, Any]) -> ConversationState:
    """(имя состояния FSM, данные FSM) -> состояние"""
    if state_name is None:
        return Idle()

    if state_name == TrainingStates.browsing.state:
        try:
            trainings = trainings_from_records(data.get("snapshot"))
        except CatalogLoadError as e:
            raise InvalidStoredState(f"Broken snapshot: {e}") from e
        return BrowsingTrainings(snapshot={t.identifier: t for t in trainings})

    raise InvalidStoredState(f"Unknown state {state_name!r}")
