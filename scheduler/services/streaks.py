import structlog
from django.contrib.auth import get_user_model
from django.db import transaction

from ..config import load_policy
from ..data.repos import count_goal_reviews
from ..domain.streaks import StreakState, advance_streak
from ..utils.time import day_bounds, get_clock

logger = structlog.get_logger()


def completed_on(user_id, day, tz) -> int:
    start, end = day_bounds(day, tz)
    return count_goal_reviews(user_id, start, end)


def completed_today(user_id, now=None) -> int:
    """Goal-counting reviews graded during the current day of the configured time zone."""
    clock = get_clock()
    return completed_on(user_id, clock.today(now), clock.tz)


def update_streak(user, now=None):
    """Advance ``user``'s streak at most once per day and persist it if it moved."""
    clock = get_clock()
    policy = load_policy()
    today = clock.today(now)
    goal = user.effective_daily_goal(policy.default_daily_goal)

    with transaction.atomic():
        locked = get_user_model().objects.select_for_update().get(pk=user.pk)
        before = StreakState(
            current_streak=locked.current_streak,
            max_streak=locked.max_streak,
            last_update=locked.last_streak_update_at,
        )
        after = advance_streak(
            before, today, goal, lambda day: completed_on(user.pk, day, clock.tz)
        )
        if after == before:
            logger.info("streak_unchanged", user_id=str(user.pk), current_streak=after.current_streak)
        else:
            locked.current_streak = after.current_streak
            locked.max_streak = after.max_streak
            locked.last_streak_update_at = after.last_update
            locked.save(update_fields=["current_streak", "max_streak", "last_streak_update_at"])
            logger.info("streak_updated",
                user_id=str(user.pk),
                current_streak=after.current_streak,
                max_streak=after.max_streak,
                daily_goal=goal,
            )

    user.current_streak = after.current_streak
    user.max_streak = after.max_streak
    user.last_streak_update_at = after.last_update
    return {"current_streak": after.current_streak, "max_streak": after.max_streak}


def progress_summary(user, now=None):
    policy = load_policy()
    streak = update_streak(user, now)
    return {
        "completed_today": completed_today(user.pk, now),
        "current_streak": streak["current_streak"],
        "max_streak": streak["max_streak"],
        "daily_goal": user.effective_daily_goal(policy.default_daily_goal),
    }
