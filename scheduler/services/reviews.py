from functools import lru_cache

import structlog
from django.db import IntegrityError, transaction

from ..config import load_policy
from ..data.repos import (
    get_existing_idempotent,
    get_or_create_schedule_for_update,
    get_schedule,
    persist_review,
    purge_cards,
    reset_schedule,
    save_schedule,
    to_schedule,
)
from ..domain.enums import Grade
from ..domain.errors import ConcurrentModification, ScheduleMissing
from ..domain.logic import Schedule, schedule_next
from ..domain.memory_model import build_memory_model
from ..domain.predictor import predict_schedule
from ..utils.time import get_clock, to_local_iso

logger = structlog.get_logger()

GRADING_ATTEMPTS = 2


@lru_cache(maxsize=4)
def memory_model_for(policy):
    return build_memory_model(policy)


def _current_schedule(user_id, card_id):
    row = get_schedule(user_id, card_id)
    return to_schedule(row) if row is not None else Schedule()


def _grade_once(user_id, card_id, grade, idempotency_key, now, clock, policy):
    # Serialize schedule update per (user, card)
    row, created = get_or_create_schedule_for_update(user_id, card_id, now)
    if created:
        logger.info("schedule_missing_created", user_id=str(user_id), card_id=str(card_id))

    transition = schedule_next(
        to_schedule(row), grade, now,
        model=memory_model_for(policy), policy=policy, tz=clock.tz,
    )
    save_schedule(row, transition.schedule)
    event = persist_review(user_id, card_id, transition, idempotency_key)

    if transition.graduated:
        logger.info("review_graduated", user_id=str(user_id), card_id=str(card_id))
    if transition.lapsed:
        logger.info("review_lapsed", user_id=str(user_id), card_id=str(card_id),
                    lapse_count=transition.schedule.lapse_count)
    return transition.schedule, event


def record_review(user_id, card_id, rating, idempotency_key=None, now=None):
    """Grade a card: transition its schedule and append the review event in one transaction.

    Returns ``(schedule, event, was_idempotent)``.
    """
    grade = Grade.parse(rating)
    clock = get_clock()
    policy = load_policy()
    now = now or clock.now()

    logger.info("review_received",
        user_id=str(user_id),
        card_id=str(card_id),
        grade=int(grade),
        idempotency_key=idempotency_key,
    )

    # Fast path: return previous result if same idempotency_key
    existing = get_existing_idempotent(user_id, card_id, idempotency_key)
    if existing:
        logger.info("idempotent_reuse",
            user_id=str(user_id),
            card_id=str(card_id),
            due_at_utc=existing.due_at.isoformat(),
            due_at_local=to_local_iso(existing.due_at, clock.tz),
        )
        return _current_schedule(user_id, card_id), existing, True

    for attempt in range(1, GRADING_ATTEMPTS + 1):
        try:
            with transaction.atomic():
                schedule, event = _grade_once(
                    user_id, card_id, grade, idempotency_key, now, clock, policy
                )
            break
        except ConcurrentModification:
            if attempt == GRADING_ATTEMPTS:
                raise
            logger.warning("concurrent_modification_retry",
                user_id=str(user_id), card_id=str(card_id), attempt=attempt)
        except IntegrityError:
            # Lost an idempotency-key race; our transaction is rolled back
            existing = get_existing_idempotent(user_id, card_id, idempotency_key)
            if existing is None:
                raise
            return _current_schedule(user_id, card_id), existing, True

    logger.info("review_scheduled",
        user_id=str(user_id),
        card_id=str(card_id),
        grade=int(grade),
        state_before=event.state_before,
        state_after=event.state_after,
        counts_toward_goal=event.counts_toward_goal,
        due_at_utc=schedule.due_at.isoformat(),
        due_at_local=to_local_iso(schedule.due_at, clock.tz),
    )
    return schedule, event, False


def get_card_schedule(user_id, card_id) -> Schedule:
    row = get_schedule(user_id, card_id)
    if row is None:
        raise ScheduleMissing(user_id, card_id)
    return to_schedule(row)


def predict_card_schedule(user_id, card_id, grade=Grade.GOOD, steps=None, now=None):
    """Preview upcoming reviews; a card without a schedule is predicted from New."""
    clock = get_clock()
    policy = load_policy()
    return predict_schedule(
        _current_schedule(user_id, card_id),
        now or clock.now(),
        model=memory_model_for(policy),
        grade=grade,
        steps=steps or policy.default_prediction_steps,
        policy=policy,
        tz=clock.tz,
    )


def reset_card(user_id, card_id, now=None) -> Schedule:
    now = now or get_clock().now()
    with transaction.atomic():
        deleted = reset_schedule(user_id, card_id, now)
    logger.info("schedule_reset", user_id=str(user_id), card_id=str(card_id), events_deleted=deleted)
    return _current_schedule(user_id, card_id)


def purge(user_id, card_ids):
    with transaction.atomic():
        schedules, events = purge_cards(user_id, card_ids)
    logger.info("cards_purged", user_id=str(user_id), schedules_deleted=schedules, events_deleted=events)
    return schedules, events
