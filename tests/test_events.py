import pytest

from partcredit.behaviour.events import Action, Event, PartTryEntry, PendingEvent
from partcredit.behaviour.states import QuestionState


def test_set_and_get_part_variables() -> None:
    event = PendingEvent(sequence=1, action=Action.SUBMIT)
    event.set_variable("_tries_part_a", 2)
    event.set_variable("_rawfraction_part_a", 0.5)

    assert event.parts["part_a"] == PartTryEntry(tries=2, raw_fraction=0.5)
    assert event.get_variable("_tries_part_a") == 2
    assert event.get_variable("_penalty_part_a") is None
    assert event.get_variable("_penalty_part_a", 0.0) == 0.0
    assert event.get_variable("_tries_missing", 0) == 0


def test_whole_question_variables() -> None:
    event = Event()
    event.set_variable("_try", 3)
    event.set_variable("_rawfraction", 0.25)

    assert event.tries == 3
    assert event.variables() == {"_try": 3, "_rawfraction": 0.25}


def test_unknown_variable_names_are_rejected() -> None:
    with pytest.raises(KeyError):
        Event().set_variable("answer", "1")
    assert Event().get_variable("answer", "x") == "x"


def test_variables_round_trip_through_flat_bag() -> None:
    variables = {"_tries_p1": 1, "_penalty_p1": 0.1, "_fraction_p1": 0.0, "_rawfraction_p1": 0.0}
    event = Event.from_variables(variables, sequence=2, state="todo")

    assert event.state is QuestionState.TODO
    assert event.variables() == variables


def test_pending_event_to_event_is_a_detached_copy() -> None:
    pending = PendingEvent(sequence=0, action=Action.SUBMIT, response={"a": "1"})
    pending.set_variable("_tries_p1", 1)
    persisted = pending.to_event()

    pending.response["a"] = "2"
    pending.set_variable("_tries_p1", 5)

    assert type(persisted) is Event
    assert persisted.response == {"a": "1"}
    assert persisted.get_variable("_tries_p1") == 1


def test_state_flags() -> None:
    assert QuestionState.COMPLETE.is_active()
    assert QuestionState.INVALID.is_active()
    assert QuestionState.ABANDONED.is_finished()
    assert QuestionState.PARTIALLY_CORRECT.is_graded()
    assert not QuestionState.ABANDONED.is_graded()
    assert QuestionState.FULLY_CORRECT.describe() == "Correct"
