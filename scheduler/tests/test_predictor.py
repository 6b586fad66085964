import pytest

from scheduler.domain.enums import CardState, Grade
from scheduler.domain.errors import InvalidGrade
from scheduler.domain.logic import Schedule, schedule_next
from scheduler.domain.predictor import predict_schedule

from .conftest import NOW, TODAY_START


def test_default_prediction_has_six_steps(fsrs_model):
    predicted = predict_schedule(Schedule(), NOW, model=fsrs_model)

    assert isinstance(predicted, list)
    assert [p.step for p in predicted] == [1, 2, 3, 4, 5, 6]


def test_good_from_new_graduates_on_third_step(fsrs_model):
    predicted = predict_schedule(Schedule(), NOW, model=fsrs_model)

    assert [p.state for p in predicted] == [CardState.LEARNING] * 2 + [CardState.REVIEW] * 4
    assert predicted[0].due_at == TODAY_START
    assert predicted[1].due_at == TODAY_START
    review_dues = [p.due_at for p in predicted[2:]]
    assert review_dues == sorted(review_dues)
    assert review_dues[0] > TODAY_START


@pytest.mark.parametrize("grade", [Grade.GOOD, Grade.EASY, Grade.HARD])
def test_prediction_matches_live_gradings(grade, fsrs_model):
    """Step k of the preview equals the schedule after k real gradings at the same instants."""
    predicted = predict_schedule(Schedule(), NOW, model=fsrs_model, grade=grade, steps=8)

    schedule, at = Schedule(), NOW
    for p in predicted:
        schedule = schedule_next(schedule, grade, at, model=fsrs_model).schedule
        assert (p.state, p.due_at) == (schedule.state, schedule.due_at)
        at = schedule.due_at


def test_again_keeps_card_in_learning(fsrs_model):
    predicted = predict_schedule(Schedule(), NOW, model=fsrs_model, grade=Grade.AGAIN, steps=3)

    assert all(p.state is CardState.LEARNING for p in predicted)
    assert all(p.due_at == TODAY_START for p in predicted)


def test_prediction_does_not_mutate_input(fsrs_model):
    start = Schedule()
    predict_schedule(start, NOW, model=fsrs_model)

    assert start == Schedule()


def test_steps_must_be_positive(fsrs_model):
    with pytest.raises(ValueError):
        predict_schedule(Schedule(), NOW, model=fsrs_model, steps=0)


def test_prediction_rejects_unknown_grade(fsrs_model):
    with pytest.raises(InvalidGrade):
        predict_schedule(Schedule(), NOW, model=fsrs_model, grade=7)
