from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple, Union

from pydantic import (
    BaseModel, ConfigDict, Field, TypeAdapter, ValidationError,
    field_serializer, field_validator, model_validator,
)

from catalog.exceptions import CatalogLoadError, UnknownExercise

# Ключи вариантов серии в JSON
REPETITIONS_TAG = "Repetitions"
CONTINUOUS_TAG = "Continuous"


class RepetitionSeries(BaseModel):
    """Подходы на повторения; load=None означает собственный вес"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["Repetitions"] = Field(default=REPETITIONS_TAG, exclude=True)
    sets: int = Field(ge=0, strict=True)
    repetitions: int = Field(ge=0, strict=True)
    load: Optional[float] = Field(default=None, ge=0, strict=True, allow_inf_nan=False)


class ContinuousSeries(BaseModel):
    """Упражнение на время; sets=None или 0 - одно непрерывное выполнение"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["Continuous"] = Field(default=CONTINUOUS_TAG, exclude=True)
    duration_seconds: int = Field(alias="time_in_seconds", ge=0, strict=True)
    sets: Optional[int] = Field(default=None, ge=0, strict=True)


Series = Union[RepetitionSeries, ContinuousSeries]


class Exercise(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1, strict=True)
    series: Series = Field(alias="serie", discriminator="kind")

    @field_validator("series", mode="before")
    @classmethod
    def unwrap_variant(cls, value: Any) -> Any:
        """{"Repetitions": {...}} -> {"kind": "Repetitions", ...}"""
        if isinstance(value, (RepetitionSeries, ContinuousSeries)):
            return value
        if not isinstance(value, dict) or len(value) != 1:
            raise ValueError("series must have exactly one variant")
        tag, body = next(iter(value.items()))
        if not isinstance(body, dict):
            raise ValueError(f"series {tag!r} must be an object")
        return {**body, "kind": tag}

    @field_serializer("series")
    def wrap_variant(self, series: Series) -> Dict[str, Any]:
        return {series.kind: series.model_dump(mode="json", by_alias=True)}


class Training(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str = Field(min_length=1, strict=True)
    exercises: Tuple[Exercise, ...]

    @model_validator(mode="after")
    def check_unique_exercises(self) -> "Training":
        seen = set()
        for exercise in self.exercises:
            if exercise.name in seen:
                raise ValueError(f"duplicate exercise {exercise.name!r} in training {self.identifier!r}")
            seen.add(exercise.name)
        return self

    def find_exercise(self, name: str) -> Exercise:
        """Найти упражнение по названию"""
        for exercise in self.exercises:
            if exercise.name == name:
                return exercise
        raise UnknownExercise(self.identifier, name)


TRAININGS = TypeAdapter(List[Training])


def _check_unique_trainings(trainings: List[Training]) -> List[Training]:
    seen = set()
    for training in trainings:
        if training.identifier in seen:
            raise CatalogLoadError(f"Duplicate training {training.identifier!r}")
        seen.add(training.identifier)
    return trainings


def trainings_from_json(raw: Union[str, bytes]) -> List[Training]:
    """Разбор каталога из JSON"""
    try:
        trainings = TRAININGS.validate_json(raw)
    except ValidationError as e:
        raise CatalogLoadError(f"Invalid catalog: {e}") from e
    return _check_unique_trainings(trainings)


def trainings_from_records(records: Any) -> List[Training]:
    """Разбор уже прочитанных записей (например, снимка сессии)"""
    try:
        trainings = TRAININGS.validate_python(records)
    except ValidationError as e:
        raise CatalogLoadError(f"Invalid catalog: {e}") from e
    return _check_unique_trainings(trainings)


def trainings_to_records(trainings: Iterable[Training]) -> List[Dict[str, Any]]:
    return TRAININGS.dump_python(list(trainings), mode="json", by_alias=True)
