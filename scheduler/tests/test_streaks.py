import logging
import uuid
from datetime import date, timedelta

import pytest
from django.contrib.auth import get_user_model

from scheduler.data.models import CardSchedule, ReviewEvent
from scheduler.domain.enums import Grade
from scheduler.domain.streaks import StreakState, advance_streak
from scheduler.services.reviews import record_review
from scheduler.services.streaks import completed_today, progress_summary, update_streak

from .conftest import NOW

logger = logging.getLogger(__name__)

TODAY = date(2025, 3, 12)
YESTERDAY = TODAY - timedelta(days=1)


def counts(**by_day):
    table = {TODAY: by_day.get("today", 0), YESTERDAY: by_day.get("yesterday", 0)}
    return lambda day: table.get(day, 0)


# Pure advancement

class TestAdvanceStreak:
    def test_same_day_is_a_no_op(self):
        state = StreakState(current_streak=4, max_streak=9, last_update=TODAY)

        assert advance_streak(state, TODAY, 5, counts(today=50)) is state

    def test_goal_met_yesterday_extends(self):
        state = StreakState(current_streak=4, max_streak=4, last_update=YESTERDAY)
        after = advance_streak(state, TODAY, 5, counts(yesterday=5))

        assert after == StreakState(current_streak=5, max_streak=5, last_update=TODAY)

    def test_missed_yesterday_but_met_today_restarts_at_one(self):
        state = StreakState(current_streak=4, max_streak=7, last_update=YESTERDAY)
        after = advance_streak(state, TODAY, 5, counts(yesterday=4, today=5))

        assert (after.current_streak, after.max_streak) == (1, 7)

    def test_missed_yesterday_and_today_resets(self):
        state = StreakState(current_streak=4, max_streak=7, last_update=YESTERDAY)
        after = advance_streak(state, TODAY, 5, counts(yesterday=1, today=2))

        assert (after.current_streak, after.max_streak, after.last_update) == (0, 7, TODAY)

    @pytest.mark.parametrize("last_update", [None, TODAY - timedelta(days=5)])
    @pytest.mark.parametrize("today_count, expected", [(5, 1), (4, 0)])
    def test_gap_or_first_update_depends_on_today(self, last_update, today_count, expected):
        state = StreakState(current_streak=3, max_streak=3, last_update=last_update)
        after = advance_streak(state, TODAY, 5, counts(yesterday=99, today=today_count))

        assert after.current_streak == expected
        assert after.max_streak == 3


# Persisted aggregation

def make_user(goal=None, **fields):
    return get_user_model().objects.create_user(
        username=f"learner-{uuid.uuid4().hex[:8]}", daily_goal=goal, **fields
    )


def add_event(user, graded_at, counts_toward_goal=True, state_before="review"):
    return ReviewEvent.objects.create(
        user_id=user.pk,
        card_id=uuid.uuid4(),
        grade=int(Grade.GOOD),
        state_before=state_before,
        state_after="review",
        graded_at=graded_at,
        counts_toward_goal=counts_toward_goal,
        due_at=graded_at + timedelta(days=3),
    )


@pytest.mark.django_db
def test_completed_today_counts_only_todays_goal_events():
    user, other = make_user(), make_user()
    add_event(user, NOW)
    add_event(user, NOW - timedelta(hours=15))  # 00:30 today
    add_event(user, NOW, counts_toward_goal=False)
    add_event(user, NOW - timedelta(days=1))
    add_event(other, NOW)

    assert completed_today(user.pk, now=NOW) == 2


@pytest.mark.django_db
def test_update_streak_twice_same_day_is_stable():
    user = make_user(goal=2)
    add_event(user, NOW)
    add_event(user, NOW)

    first = update_streak(user, now=NOW)
    add_event(user, NOW)
    second = update_streak(user, now=NOW + timedelta(hours=1))

    assert first == second == {"current_streak": 1, "max_streak": 1}
    user.refresh_from_db()
    assert user.last_streak_update_at == TODAY


@pytest.mark.django_db
def test_update_streak_extends_after_yesterdays_goal():
    user = make_user(goal=1, current_streak=6, max_streak=6, last_streak_update_at=YESTERDAY)
    add_event(user, NOW - timedelta(days=1))

    result = update_streak(user, now=NOW)

    assert result == {"current_streak": 7, "max_streak": 7}
    user.refresh_from_db()
    assert (user.current_streak, user.max_streak, user.last_streak_update_at) == (7, 7, TODAY)


@pytest.mark.django_db
def test_default_goal_applies_when_user_has_none():
    user = make_user()
    for _ in range(19):
        add_event(user, NOW)

    assert update_streak(user, now=NOW)["current_streak"] == 0


@pytest.mark.django_db
def test_five_good_reviews_meet_a_goal_of_five():
    """Five Good grades on Review cards count toward the goal; the streak settles once a day."""
    user = make_user(goal=5)
    for _ in range(5):
        card_id = uuid.uuid4()
        CardSchedule.objects.create(
            user_id=user.pk,
            card_id=card_id,
            state="review",
            stability=5.0,
            difficulty=5.0,
            review_count=3,
            last_reviewed_at=NOW - timedelta(days=3),
            due_at=NOW - timedelta(hours=1),
        )
        record_review(user.pk, card_id, Grade.GOOD, now=NOW)

    assert completed_today(user.pk, now=NOW) == 5

    first = progress_summary(user, now=NOW)
    second = progress_summary(user, now=NOW + timedelta(minutes=5))

    assert first == second == {
        "completed_today": 5,
        "current_streak": 1,
        "max_streak": 1,
        "daily_goal": 5,
    }
    logger.info("✓ Passed: goal of 5 met, streak %s", first["current_streak"])
