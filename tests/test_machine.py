import logging

import pytest
from aiogram.exceptions import TelegramBadRequest
from aiogram.methods import AnswerCallbackQuery

from catalog.loader import Catalog
from catalog.models import ContinuousSeries, Exercise, RepetitionSeries, Training
from database.session_store import SessionStoreError
from keyboards.callbacks import Action
from states.events import CallbackEvent, TextCommand
from states.machine import (
    CANCEL_TEXT, CHOOSE_TRAINING_TEXT, COMMAND_NOT_FOUND_TEXT, SESSION_EXPIRED_TEXT,
    ConversationMachine, help_text,
)
from states.training_states import BrowsingTrainings, Idle

from conftest import BrokenSessions, FakeMessenger, keyboard_payloads, run

CHAT_ID = 42


def command(name, text=None):
    return TextCommand(chat_id=CHAT_ID, command=name, raw_text=text or f"/{name}")


def click(payload, callback_id="cb-1"):
    return CallbackEvent(chat_id=CHAT_ID, callback_id=callback_id, payload=payload)


def start(machine, messenger):
    return run(machine.handle_command(command("start"), messenger))


# ========== КОМАНДЫ ==========

def test_start_from_idle(machine, messenger, catalog):
    state = start(machine, messenger)

    assert isinstance(state, BrowsingTrainings)
    assert state.snapshot == catalog.snapshot()

    chat_id, text, markup = messenger.messages[0]
    assert (chat_id, text) == (CHAT_ID, CHOOSE_TRAINING_TEXT)
    assert keyboard_payloads(markup) == [[("A", "T:A")], [("B", "T:B")]]
    assert run(machine.sessions.get(CHAT_ID)) == state


def test_start_keyboard_follows_catalog_order(sessions, messenger):
    identifiers = ["Push", "Pull", "Legs", "Core"]
    catalog = Catalog([Training(identifier=i, exercises=()) for i in identifiers])

    start(ConversationMachine(catalog, sessions), messenger)

    rows = keyboard_payloads(messenger.messages[0][2])
    assert rows == [[(i, f"T:{i}")] for i in identifiers]


def test_start_twice_resets_snapshot(machine, messenger, catalog):
    start(machine, messenger)

    updated = Catalog([Training(identifier="New", exercises=())])
    machine.catalog = updated
    state = start(machine, messenger)

    assert list(state.snapshot) == ["New"]
    assert run(machine.sessions.get(CHAT_ID)).snapshot == updated.snapshot()


def test_help(machine, messenger):
    state = run(machine.handle_command(command("help"), messenger))

    assert state == Idle()
    assert messenger.texts == [help_text()]
    assert "/start" in help_text() and "/help" in help_text()


def test_help_keeps_browsing_state(machine, messenger):
    browsing = start(machine, messenger)
    state = run(machine.handle_command(command("help"), messenger))
    assert state == browsing


def test_unknown_command(machine, messenger):
    state = run(machine.handle_command(command("", "/dance"), messenger))

    assert state == Idle()
    assert messenger.texts == [COMMAND_NOT_FOUND_TEXT]


def test_cancel_returns_to_idle(machine, messenger):
    start(machine, messenger)
    state = run(machine.handle_command(command("cancel"), messenger))

    assert state == Idle()
    assert messenger.texts[-1] == CANCEL_TEXT
    assert run(machine.sessions.get(CHAT_ID)) == Idle()


# ========== КНОПКИ ==========

def test_select_training(machine, messenger):
    browsing = start(machine, messenger)
    state = run(machine.handle_callback(click("T:B"), messenger))

    assert state == browsing
    chat_id, text, markup = messenger.messages[-1]
    assert text == "Exercises for training B"
    assert keyboard_payloads(markup) == [
        [("Free Weight Squat", "E:B:Free Weight Squat"), ("Change Load", "CL:B:Free Weight Squat")],
        [("Leg Press", "E:B:Leg Press"), ("Change Load", "CL:B:Leg Press")],
        [("Completed!", "FE:B")],
    ]
    assert messenger.answered == ["cb-1"]


def test_select_exercise(machine, messenger):
    start(machine, messenger)
    run(machine.handle_callback(click("E:B:Leg Press"), messenger))

    assert messenger.texts[-1] == "Leg Press - 3 sets of 12 repetitions with load of 37.50"
    assert messenger.answered == ["cb-1"]


def test_unknown_training_in_snapshot(machine, messenger):
    start(machine, messenger)
    state = run(machine.handle_callback(click("T:Z"), messenger))

    assert isinstance(state, BrowsingTrainings)
    assert messenger.texts[-1] == "Training Z not found. Send /start to refresh the list."
    assert messenger.answered == ["cb-1"]


def test_unknown_exercise(machine, messenger):
    start(machine, messenger)
    run(machine.handle_callback(click("E:A:Crunch"), messenger))

    assert messenger.texts[-1] == "Exercise Crunch not found in training A."
    assert messenger.answered == ["cb-1"]


def test_training_selection_uses_snapshot(machine, messenger):
    start(machine, messenger)
    machine.catalog = Catalog([])

    run(machine.handle_callback(click("T:A"), messenger))
    assert messenger.texts[-1] == "Exercises for training A"


def test_exercise_selection_uses_live_catalog(machine, messenger):
    start(machine, messenger)
    machine.catalog = Catalog([
        Training(identifier="A", exercises=(
            Exercise(name="Plank", series=ContinuousSeries(duration_seconds=60)),
        )),
    ])

    run(machine.handle_callback(click("E:A:Plank"), messenger))
    assert messenger.texts[-1] == "Plank - for 1 minutes"

    machine.catalog = Catalog([])
    run(machine.handle_callback(click("E:A:Plank"), messenger))
    assert messenger.texts[-1] == "Training A not found. Send /start to refresh the list."


@pytest.mark.parametrize("payload", ["CL:A:Plank", "FE:A"])
def test_not_implemented_actions_are_acknowledged(machine, messenger, payload):
    browsing = start(machine, messenger)
    sent = len(messenger.messages)

    state = run(machine.handle_callback(click(payload), messenger))

    assert state == browsing
    assert len(messenger.messages) == sent
    assert messenger.answered == ["cb-1"]


@pytest.mark.parametrize("payload", [None, "", "X:1", "T", "E:A:Plank:Side"])
def test_malformed_callback(machine, messenger, payload):
    browsing = start(machine, messenger)
    sent = len(messenger.messages)

    state = run(machine.handle_callback(click(payload), messenger))

    assert state == browsing
    assert len(messenger.messages) == sent
    assert messenger.answered == ["cb-1"]


def test_callback_in_idle(machine, messenger):
    state = run(machine.handle_callback(click("T:A"), messenger))

    assert state == Idle()
    assert messenger.texts == [SESSION_EXPIRED_TEXT]
    assert messenger.answered == ["cb-1"]


def test_every_action_has_a_handler(machine):
    assert set(machine._callback_handlers) == set(Action)


# ========== ОШИБКИ ХРАНИЛИЩА ==========

def test_store_error_propagates_from_command(catalog, sessions, messenger):
    machine = ConversationMachine(catalog, BrokenSessions(sessions))

    with pytest.raises(SessionStoreError):
        run(machine.handle_command(command("start"), messenger))


def test_store_error_still_acknowledges_callback(catalog, sessions, messenger):
    machine = ConversationMachine(catalog, BrokenSessions(sessions))

    with pytest.raises(SessionStoreError):
        run(machine.handle_callback(click("T:A"), messenger))
    assert messenger.answered == ["cb-1"]


class ExpiredCallbackMessenger(FakeMessenger):
    """Telegram отклоняет подтверждение устаревшего callback"""

    async def answer_callback(self, callback_id):
        await super().answer_callback(callback_id)
        raise TelegramBadRequest(
            method=AnswerCallbackQuery(callback_query_id=callback_id),
            message="Bad Request: query is too old and response timeout expired",
        )


def test_failed_acknowledgement_keeps_store_error(catalog, sessions):
    machine = ConversationMachine(catalog, BrokenSessions(sessions))
    messenger = ExpiredCallbackMessenger()

    with pytest.raises(SessionStoreError):
        run(machine.handle_callback(click("T:A"), messenger))
    assert messenger.answered == ["cb-1"]


def test_failed_acknowledgement_is_logged(machine, caplog):
    messenger = ExpiredCallbackMessenger()
    start(machine, messenger)

    with caplog.at_level(logging.WARNING, logger="states.machine"):
        state = run(machine.handle_callback(click("T:A"), messenger))

    assert isinstance(state, BrowsingTrainings)
    assert messenger.texts[-1] == "Exercises for training A"
    assert any("cb-1" in record.getMessage() for record in caplog.records)


# ========== СЦЕНАРИЙ ==========

def test_end_to_end(sessions):
    catalog = Catalog([
        Training(identifier="A", exercises=(
            Exercise(name="Plank", series=ContinuousSeries(duration_seconds=30, sets=3)),
        )),
    ])
    machine = ConversationMachine(catalog, sessions)
    messenger = FakeMessenger()

    run(machine.handle_command(command("start"), messenger))
    assert keyboard_payloads(messenger.messages[-1][2]) == [[("A", "T:A")]]

    run(machine.handle_callback(click("T:A", "cb-1"), messenger))
    assert keyboard_payloads(messenger.messages[-1][2]) == [
        [("Plank", "E:A:Plank"), ("Change Load", "CL:A:Plank")],
        [("Completed!", "FE:A")],
    ]

    run(machine.handle_callback(click("E:A:Plank", "cb-2"), messenger))
    assert messenger.texts[-1] == "Plank - 3 sets of 0 minutes and 30 seconds"
    assert messenger.answered == ["cb-1", "cb-2"]


def test_bodyweight_exercise(sessions, messenger):
    catalog = Catalog([
        Training(identifier="A", exercises=(
            Exercise(name="Squat", series=RepetitionSeries(sets=4, repetitions=10)),
        )),
    ])
    machine = ConversationMachine(catalog, sessions)

    start(machine, messenger)
    run(machine.handle_callback(click("E:A:Squat"), messenger))
    assert messenger.texts[-1] == "Squat - 4 sets of 10 repetitions"
