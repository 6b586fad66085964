from django.db import IntegrityError, transaction
from django.db.models import Count, F

from ..domain.enums import CardState
from ..domain.errors import ConcurrentModification
from ..domain.logic import Schedule
from .models import CardSchedule, ReviewEvent

SCHEDULE_FIELDS = (
    "state",
    "stability",
    "difficulty",
    "review_count",
    "lapse_count",
    "due_at",
    "last_reviewed_at",
    "learning_step",
    "consecutive_good_count",
    "last_good_at",
)


def to_schedule(row: CardSchedule) -> Schedule:
    values = {name: getattr(row, name) for name in SCHEDULE_FIELDS}
    values["state"] = CardState(row.state)
    return Schedule(**values)


def _schedule_values(schedule: Schedule, now) -> dict:
    values = {name: getattr(schedule, name) for name in SCHEDULE_FIELDS}
    values["state"] = schedule.state.value
    if values["due_at"] is None:
        values["due_at"] = now
    return values


def get_or_create_schedule_for_update(user_id, card_id, now):
    """
    Fetch schedule row and lock it for update to avoid races.
    Create a New one due at ``now`` if missing. Returns ``(row, created)``.
    """
    try:
        # Lock existing
        return (CardSchedule.objects
                .select_for_update()
                .get(user_id=user_id, card_id=card_id)), False
    except CardSchedule.DoesNotExist:
        pass
    try:
        with transaction.atomic():
            sched = CardSchedule.objects.create(user_id=user_id, card_id=card_id, due_at=now)
        created = True
    except IntegrityError:
        # Created concurrently; fall through and lock theirs
        created = False
    sched = (CardSchedule.objects
             .select_for_update()
             .get(user_id=user_id, card_id=card_id))
    return sched, created


def get_schedule(user_id, card_id):
    return CardSchedule.objects.filter(user_id=user_id, card_id=card_id).first()


def save_schedule(row: CardSchedule, schedule: Schedule) -> CardSchedule:
    """Write ``schedule`` over ``row`` if nobody else did since it was read."""
    values = _schedule_values(schedule, row.due_at)
    updated = (CardSchedule.objects
               .filter(pk=row.pk, version=row.version)
               .update(version=F("version") + 1, **values))
    if updated != 1:
        raise ConcurrentModification(
            f"schedule {row.pk} changed since version {row.version}"
        )
    for name, value in values.items():
        setattr(row, name, value)
    row.version += 1
    return row


def get_existing_idempotent(user_id, card_id, idem_key):
    if not idem_key:
        return None
    return ReviewEvent.objects.filter(
        user_id=user_id, card_id=card_id, idempotency_key=idem_key
    ).first()


def persist_review(user_id, card_id, transition, idem_key=None):
    """
    Insert the ReviewEvent for ``transition``. A duplicate idempotency key
    raises IntegrityError so the caller's transaction rolls back whole.
    """
    return ReviewEvent.objects.create(
        user_id=user_id,
        card_id=card_id,
        grade=int(transition.grade),
        state_before=transition.state_before.value,
        state_after=transition.schedule.state.value,
        graded_at=transition.graded_at,
        counts_toward_goal=transition.counts_toward_goal,
        due_at=transition.schedule.due_at,
        idempotency_key=idem_key or None,
    )


def reset_schedule(user_id, card_id, now):
    """Back to New, due at ``now``, and forget the card's review history. Returns deleted event count."""
    deleted, _ = ReviewEvent.objects.filter(user_id=user_id, card_id=card_id).delete()
    fresh = _schedule_values(Schedule(), now)
    updated = (CardSchedule.objects
               .filter(user_id=user_id, card_id=card_id)
               .update(version=F("version") + 1, **fresh))
    if not updated:
        CardSchedule.objects.create(user_id=user_id, card_id=card_id, **fresh)
    return deleted


def purge_cards(user_id, card_ids):
    card_ids = list(card_ids)
    events, _ = ReviewEvent.objects.filter(user_id=user_id, card_id__in=card_ids).delete()
    schedules, _ = CardSchedule.objects.filter(user_id=user_id, card_id__in=card_ids).delete()
    return schedules, events


def due_card_ids(user_id, until):
    return list(
        CardSchedule.objects.filter(user_id=user_id, due_at__lte=until)
        .order_by("due_at")
        .values_list("card_id", flat=True)
    )


def count_goal_reviews(user_id, start, end):
    return ReviewEvent.objects.filter(
        user_id=user_id,
        counts_toward_goal=True,
        graded_at__gte=start,
        graded_at__lt=end,
    ).count()


def events_between(user_id, start, end):
    return (
        ReviewEvent.objects.filter(user_id=user_id, graded_at__gte=start, graded_at__lt=end)
        .order_by("graded_at")
        .values("graded_at", "state_before", "counts_toward_goal")
    )


def schedule_state_counts(user_id):
    rows = (
        CardSchedule.objects.filter(user_id=user_id)
        .values("state")
        .annotate(count=Count("id"))
    )
    return {row["state"]: row["count"] for row in rows}
