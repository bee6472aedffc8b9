import pytest

from partcredit.behaviour.events import Action, PartScoreResult, PartTryRecord, PendingEvent
from partcredit.behaviour.history import ReconstructedState
from partcredit.behaviour.updater import apply_part_scores, next_record


def _score(part: str, raw: float, penalty: float = 0.1) -> PartScoreResult:
    return PartScoreResult(part_name=part, raw_fraction=raw, penalty=penalty)


def test_first_try_starts_from_zero() -> None:
    record = next_record(None, _score("p1", 1.0), apply_penalties=True)

    assert record.tries == 1
    assert record.penalty == pytest.approx(0.1)
    assert record.fraction == pytest.approx(0.9)
    assert record.raw_fraction == 1.0


def test_net_fraction_uses_penalty_after_this_try() -> None:
    prior = PartTryRecord(tries=1, penalty=0.1, fraction=0.0, raw_fraction=0.0)
    record = next_record(prior, _score("p1", 1.0), apply_penalties=True)

    assert record.tries == 2
    assert record.penalty == pytest.approx(0.2)
    assert record.fraction == pytest.approx(0.8)


def test_worse_try_never_lowers_best_fraction() -> None:
    prior = PartTryRecord(tries=2, penalty=0.2, fraction=0.8, raw_fraction=1.0)
    record = next_record(prior, _score("p1", 0.5), apply_penalties=True)

    assert record.fraction == pytest.approx(0.8)
    assert record.raw_fraction == 0.5
    assert record.penalty == pytest.approx(0.3)


@pytest.mark.parametrize(
    "raws",
    [
        (0.0, 1.0),
        (1.0, 0.0),
        (0.5, 0.6),
        (0.9, 0.2, 1.0, 0.0),
    ],
)
def test_best_fraction_is_monotonic(raws: tuple) -> None:
    record = None
    previous_best = float("-inf")
    for raw in raws:
        record = next_record(record, _score("p1", raw, penalty=0.25), apply_penalties=True)
        assert record.fraction >= previous_best
        previous_best = record.fraction


def test_penalties_disabled_keep_penalty_at_zero() -> None:
    record = None
    for raw in (0.2, 0.4, 0.3, 0.7):
        record = next_record(record, _score("p1", raw, penalty=0.5), apply_penalties=False)
        assert record.penalty == 0.0

    assert record.tries == 4
    assert record.fraction == pytest.approx(0.7)


def test_penalties_disabled_net_equals_raw() -> None:
    record = next_record(None, _score("p1", 0.6, penalty=0.3), apply_penalties=False)

    assert record.fraction == pytest.approx(record.raw_fraction)


def test_apply_part_scores_writes_pending_event() -> None:
    pending = PendingEvent(sequence=3, action=Action.SUBMIT, response={"x": "1"})
    state = ReconstructedState().with_parts(
        {"p1": PartTryRecord(tries=1, penalty=0.1, fraction=0.0, raw_fraction=0.0)},
        {"x": "0"},
    )

    updated = apply_part_scores(
        state,
        {"p1": _score("p1", 1.0), "p2": _score("p2", 0.5)},
        pending,
        apply_penalties=True,
    )

    assert pending.get_variable("_tries_p1") == 2
    assert pending.get_variable("_penalty_p1") == pytest.approx(0.2)
    assert pending.get_variable("_fraction_p1") == pytest.approx(0.8)
    assert pending.get_variable("_rawfraction_p1") == 1.0
    assert pending.get_variable("_tries_p2") == 1
    assert updated.tries == {"p1": 2, "p2": 1}
    assert updated.last_graded_responses["p2"] == {"x": "1"}
    assert state.tries == {"p1": 1}


def test_apply_part_scores_without_scores_writes_nothing() -> None:
    pending = PendingEvent(sequence=0, action=Action.SUBMIT)
    state = ReconstructedState()

    assert apply_part_scores(state, {}, pending, apply_penalties=True) is state
    assert pending.parts == {}
    assert pending.variables() == {}
