from catalog.models import ContinuousSeries, Exercise, RepetitionSeries, Series


def format_duration(seconds: int) -> str:
    """
    Форматирует длительность в минуты и секунды

    - 1800 -> "30 minutes"
    - 90 -> "1 minutes and 30 seconds"
    """
    minutes, rest = divmod(seconds, 60)
    if rest == 0:
        return f"{minutes} minutes"
    return f"{minutes} minutes and {rest} seconds"


def format_series(series: Series) -> str:
    """
    Форматирует серию для пользователя

    Примеры:
    - RepetitionSeries(4, 10) -> "4 sets of 10 repetitions"
    - RepetitionSeries(3, 12, 37.5) -> "3 sets of 12 repetitions with load of 37.50"
    - ContinuousSeries(30, 3) -> "3 sets of 0 minutes and 30 seconds"
    - ContinuousSeries(1800) -> "for 30 minutes"
    """
    if isinstance(series, RepetitionSeries):
        text = f"{series.sets} sets of {series.repetitions} repetitions"
        if series.load is not None:
            text += f" with load of {series.load:.2f}"
        return text

    if isinstance(series, ContinuousSeries):
        time_text = format_duration(series.duration_seconds)
        # sets=0 - то же самое, что без подходов
        if series.sets:
            return f"{series.sets} sets of {time_text}"
        return f"for {time_text}"

    raise TypeError(f"Unsupported series type: {type(series).__name__}")


def format_exercise(exercise: Exercise) -> str:
    """Название и серия: "Plank - 3 sets of 0 minutes and 30 seconds" """
    return f"{exercise.name} - {format_series(exercise.series)}"
