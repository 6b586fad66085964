from collections import Counter
from datetime import date, timedelta

from ..config import load_policy
from ..data.repos import events_between, schedule_state_counts
from ..domain.enums import CardState
from ..utils.time import day_bounds, get_clock, local_date


def _days(first, last):
    day = first
    while day <= last:
        yield day
        day += timedelta(days=1)


def _events_by_day(user_id, first, last, tz):
    start = day_bounds(first, tz)[0]
    end = day_bounds(last, tz)[1]
    buckets = {}
    for event in events_between(user_id, start, end):
        buckets.setdefault(local_date(event["graded_at"], tz), []).append(event)
    return buckets


def weekly_stats(user_id, now=None):
    """Monday to Sunday of the current week: goal reviews and all reviews per day."""
    clock = get_clock()
    today = clock.today(now)
    monday = today - timedelta(days=today.weekday())
    sunday = monday + timedelta(days=6)
    buckets = _events_by_day(user_id, monday, sunday, clock.tz)

    result = []
    for day in _days(monday, sunday):
        events = buckets.get(day, [])
        result.append({
            "date": day.isoformat(),
            "goal_reviews_count": sum(1 for e in events if e["counts_toward_goal"]),
            "any_reviews_count": len(events),
        })
    return result


def stats_range(from_date, to_date, today, policy=None):
    """Resolve an optional date range, defaulting to the week ending ``today``.

    Raises ValueError when the range is reversed, longer than ``max_stats_days``
    or touching the first or last representable day.
    """
    policy = policy or load_policy()
    to_date = to_date or today
    if to_date == date.max:
        raise ValueError("to_date is out of range")
    if from_date is None:
        if (to_date - date.min).days < policy.default_stats_days:
            raise ValueError("to_date is out of range")
        from_date = to_date - timedelta(days=policy.default_stats_days - 1)
    if from_date == date.min:
        raise ValueError("from_date is out of range")
    if from_date > to_date:
        raise ValueError("from_date must not be after to_date")
    if (to_date - from_date).days >= policy.max_stats_days:
        raise ValueError(f"date range must not exceed {policy.max_stats_days} days")
    return from_date, to_date


def daily_stats(user_id, from_date=None, to_date=None, now=None):
    """Per-day goal reviews plus events bucketed by the state the card was in."""
    clock = get_clock()
    from_date, to_date = stats_range(from_date, to_date, clock.today(now))
    buckets = _events_by_day(user_id, from_date, to_date, clock.tz)

    result = []
    for day in _days(from_date, to_date):
        events = buckets.get(day, [])
        states = Counter(e["state_before"] for e in events)
        result.append({
            "date": day.isoformat(),
            "reviews_count": sum(1 for e in events if e["counts_toward_goal"]),
            "new_count": states[CardState.NEW.value],
            "learning_count": states[CardState.LEARNING.value],
            "review_count": states[CardState.REVIEW.value],
            "mastered_count": states[CardState.MASTERED.value],
        })
    return result


def learning_progress(user_id):
    counts = schedule_state_counts(user_id)
    return {state.value: counts.get(state.value, 0) for state in CardState}
