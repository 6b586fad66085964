import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Custom User model that extends the default Django User model.
    The UUID primary key is the ``user_id`` the scheduler keys its rows by;
    the remaining fields hold the daily goal and streak bookkeeping.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    daily_goal = models.PositiveIntegerField(null=True, blank=True)
    current_streak = models.PositiveIntegerField(default=0)
    max_streak = models.PositiveIntegerField(default=0)
    last_streak_update_at = models.DateField(null=True, blank=True)

    def effective_daily_goal(self, default):
        return self.daily_goal or default
