from dataclasses import dataclass, replace
from datetime import datetime, timezone as dt_tz, tzinfo
from typing import Optional

from .. import config
from ..utils.time import local_date, start_of_day
from .enums import CardState, Grade, MemoryState
from .memory_model import MemoryInput, MemoryModel


@dataclass(frozen=True)
class Schedule:
    """Scheduling state of one card. Counters for the Learning phase are zero outside it."""

    state: CardState = CardState.NEW
    stability: Optional[float] = config.EMPTY_STABILITY
    difficulty: Optional[float] = config.EMPTY_DIFFICULTY
    review_count: int = 0
    lapse_count: int = 0
    due_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None
    learning_step: int = 0
    consecutive_good_count: int = 0
    last_good_at: Optional[datetime] = None


@dataclass(frozen=True)
class Transition:
    schedule: Schedule
    grade: Grade
    state_before: CardState
    graded_at: datetime
    counts_toward_goal: bool
    graduated: bool = False
    lapsed: bool = False


def _memory_input(schedule: Schedule) -> MemoryInput:
    return MemoryInput(
        stability=schedule.stability,
        difficulty=schedule.difficulty,
        review_count=schedule.review_count,
        lapse_count=schedule.lapse_count,
        last_reviewed_at=schedule.last_reviewed_at,
        due_at=schedule.due_at,
        memory_state=schedule.state.memory_state,
    )


def _is_recent(last_good_at, now, tz, policy) -> bool:
    if last_good_at is None:
        return False
    if local_date(last_good_at, tz) == local_date(now, tz):
        return True
    return now - last_good_at <= policy.good_recency_window


def _start_learning(schedule, grade, now, day_start):
    counted = grade.is_success
    return replace(
        schedule,
        state=CardState.LEARNING,
        learning_step=1,
        due_at=day_start,
        last_reviewed_at=now,
        consecutive_good_count=1 if counted else 0,
        last_good_at=now if counted else None,
    )


def _review_learning(schedule, grade, now, day_start, model, policy, tz):
    if not grade.is_success:
        lapse_count = schedule.lapse_count + (1 if grade is Grade.AGAIN else 0)
        return replace(
            schedule,
            learning_step=1,
            due_at=day_start,
            last_reviewed_at=now,
            lapse_count=lapse_count,
            consecutive_good_count=0,
            last_good_at=None,
        ), False

    if _is_recent(schedule.last_good_at, now, tz, policy):
        good_count = schedule.consecutive_good_count + 1
    else:
        good_count = 1

    if good_count < policy.graduation_good_streak:
        return replace(
            schedule,
            learning_step=schedule.learning_step + 1,
            due_at=day_start,
            last_reviewed_at=now,
            consecutive_good_count=good_count,
            last_good_at=now,
        ), False

    result = model.apply(_memory_input(schedule), grade, now)
    return replace(
        schedule,
        state=CardState.REVIEW,
        stability=result.stability,
        difficulty=result.difficulty,
        due_at=result.due_at,
        review_count=result.review_count,
        lapse_count=result.lapse_count,
        last_reviewed_at=now,
        learning_step=0,
        consecutive_good_count=0,
        last_good_at=None,
    ), True


def _lapse(schedule, now, day_start, policy):
    difficulty = config.EMPTY_DIFFICULTY if policy.lapse_resets_difficulty else schedule.difficulty
    return replace(
        schedule,
        state=CardState.LEARNING,
        stability=config.EMPTY_STABILITY,
        difficulty=difficulty,
        review_count=0,
        lapse_count=schedule.lapse_count + 1,
        due_at=day_start,
        last_reviewed_at=now,
        learning_step=1,
        consecutive_good_count=0,
        last_good_at=None,
    )


def _review(schedule, grade, now, day_start, model, policy):
    result = model.apply(_memory_input(schedule), grade, now)
    updated = replace(
        schedule,
        stability=result.stability,
        difficulty=result.difficulty,
        review_count=result.review_count,
        lapse_count=result.lapse_count,
        last_reviewed_at=now,
        consecutive_good_count=0,
        last_good_at=None,
    )
    if result.memory_state is not MemoryState.REVIEW:
        return replace(updated, state=CardState.LEARNING, learning_step=1, due_at=day_start)

    mastered = grade is Grade.EASY and result.review_count >= policy.mastered_review_threshold
    return replace(
        updated,
        state=CardState.MASTERED if mastered else CardState.REVIEW,
        due_at=result.due_at,
        learning_step=0,
    )


def schedule_next(
    schedule: Schedule,
    grade,
    now: datetime,
    *,
    model: MemoryModel,
    policy: config.Policy = config.DEFAULT_POLICY,
    tz: tzinfo = dt_tz.utc,
) -> Transition:
    """Apply one grade to ``schedule`` at ``now``.

    Pure: the result carries the new schedule plus what the review event
    needs (prior state, whether it counts toward the daily goal). ``tz``
    fixes where calendar days start.
    """
    grade = Grade.parse(grade)
    before = schedule.state
    day_start = start_of_day(now, tz)
    graduated = lapsed = False

    if before is CardState.NEW:
        nxt = _start_learning(schedule, grade, now, day_start)
    elif before is CardState.LEARNING:
        nxt, graduated = _review_learning(schedule, grade, now, day_start, model, policy, tz)
    elif grade is Grade.AGAIN:
        nxt = _lapse(schedule, now, day_start, policy)
        lapsed = True
    else:
        nxt = _review(schedule, grade, now, day_start, model, policy)

    counts = grade.is_success and (before.is_reviewing or graduated)
    return Transition(
        schedule=nxt,
        grade=grade,
        state_before=before,
        graded_at=now,
        counts_toward_goal=counts,
        graduated=graduated,
        lapsed=lapsed,
    )
