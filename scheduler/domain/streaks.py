from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Callable, Optional


@dataclass(frozen=True)
class StreakState:
    current_streak: int = 0
    max_streak: int = 0
    last_update: Optional[date] = None


def advance_streak(
    state: StreakState,
    today: date,
    daily_goal: int,
    completed_on: Callable[[date], int],
) -> StreakState:
    """Recompute the streak once per day.

    Same-day calls return ``state`` untouched. Otherwise only yesterday's and
    today's goal counts are consulted, never the whole history.
    """
    if state.last_update == today:
        return state

    def goal_met(day):
        return completed_on(day) >= daily_goal

    yesterday = today - timedelta(days=1)
    if state.last_update == yesterday and goal_met(yesterday):
        current = state.current_streak + 1
    else:
        current = 1 if goal_met(today) else 0

    return replace(
        state,
        current_streak=current,
        max_streak=max(state.max_streak, current),
        last_update=today,
    )
