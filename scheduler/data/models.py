from django.db import models
from django.utils import timezone

from ..domain.enums import CARD_STATE_CHOICES, CardState


class CardSchedule(models.Model):
    user_id = models.UUIDField()
    card_id = models.UUIDField()
    state = models.CharField(max_length=16, choices=CARD_STATE_CHOICES, default=CardState.NEW.value)
    stability = models.FloatField(null=True, blank=True)
    difficulty = models.FloatField(null=True, blank=True)
    review_count = models.PositiveIntegerField(default=0)
    lapse_count = models.PositiveIntegerField(default=0)
    due_at = models.DateTimeField(default=timezone.now)  # UTC
    last_reviewed_at = models.DateTimeField(null=True, blank=True)
    learning_step = models.PositiveSmallIntegerField(default=0)
    consecutive_good_count = models.PositiveSmallIntegerField(default=0)
    last_good_at = models.DateTimeField(null=True, blank=True)
    version = models.PositiveIntegerField(default=0)  # optimistic lock

    class Meta:
        app_label = "scheduler"
        unique_together = (("user_id", "card_id"),)
        indexes = [
            models.Index(fields=["user_id", "due_at"], name="sched_user_due_idx"),
            models.Index(fields=["user_id", "state"], name="sched_user_state_idx"),
        ]


class ReviewEvent(models.Model):
    """Append-only; rows go away only with a card reset or purge."""

    user_id = models.UUIDField()
    card_id = models.UUIDField()
    grade = models.SmallIntegerField()
    state_before = models.CharField(max_length=16, choices=CARD_STATE_CHOICES)
    state_after = models.CharField(max_length=16, choices=CARD_STATE_CHOICES)
    graded_at = models.DateTimeField(default=timezone.now)
    counts_toward_goal = models.BooleanField(default=False)
    due_at = models.DateTimeField()
    idempotency_key = models.CharField(max_length=64, null=True, blank=True)

    class Meta:
        app_label = "scheduler"
        unique_together = (("user_id", "card_id", "idempotency_key"),)
        indexes = [
            models.Index(fields=["card_id", "user_id", "graded_at"], name="event_card_user_time_idx"),
            models.Index(fields=["user_id", "counts_toward_goal", "graded_at"], name="event_user_goal_time_idx"),
        ]
