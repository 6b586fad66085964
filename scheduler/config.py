from dataclasses import dataclass, replace
from datetime import timedelta

TIME_ZONE = "UTC"  # day boundaries for "today", start-of-day due dates and streaks

MASTERED_REVIEW_THRESHOLD = 18
GRADUATION_GOOD_STREAK = 3
GOOD_RECENCY_WINDOW_DAYS = 2
LAPSE_RESETS_DIFFICULTY = True

# Canonical empty card: no memory parameters yet.
EMPTY_STABILITY = None
EMPTY_DIFFICULTY = None

DESIRED_RETENTION = 0.9
MAXIMUM_INTERVAL_DAYS = 365
RELEARNING_STEPS_MINUTES = (10,)
MEMORY_MODEL = "scheduler.domain.memory_model.FsrsMemoryModel"

DEFAULT_DAILY_GOAL = 20
DEFAULT_PREDICTION_STEPS = 6
MAX_PREDICTION_STEPS = 60
DEFAULT_STATS_DAYS = 7
MAX_STATS_DAYS = 366


@dataclass(frozen=True)
class Policy:
    time_zone: str = TIME_ZONE
    mastered_review_threshold: int = MASTERED_REVIEW_THRESHOLD
    graduation_good_streak: int = GRADUATION_GOOD_STREAK
    good_recency_window_days: int = GOOD_RECENCY_WINDOW_DAYS
    lapse_resets_difficulty: bool = LAPSE_RESETS_DIFFICULTY
    desired_retention: float = DESIRED_RETENTION
    maximum_interval_days: int = MAXIMUM_INTERVAL_DAYS
    relearning_steps_minutes: tuple = RELEARNING_STEPS_MINUTES
    memory_model: str = MEMORY_MODEL
    default_daily_goal: int = DEFAULT_DAILY_GOAL
    default_prediction_steps: int = DEFAULT_PREDICTION_STEPS
    max_prediction_steps: int = MAX_PREDICTION_STEPS
    default_stats_days: int = DEFAULT_STATS_DAYS
    max_stats_days: int = MAX_STATS_DAYS

    @property
    def good_recency_window(self) -> timedelta:
        return timedelta(days=self.good_recency_window_days)

    @property
    def relearning_steps(self):
        return tuple(timedelta(minutes=m) for m in self.relearning_steps_minutes)


DEFAULT_POLICY = Policy()


def load_policy() -> Policy:
    """Defaults above, overridden by the ``SCHEDULER`` Django setting."""
    from django.conf import settings

    overrides = getattr(settings, "SCHEDULER", None) or {}
    unknown = set(overrides) - {f.upper() for f in Policy.__dataclass_fields__}
    if unknown:
        raise ValueError(f"unknown SCHEDULER settings: {sorted(unknown)}")
    values = {key.lower(): value for key, value in overrides.items()}
    if "relearning_steps_minutes" in values:
        values["relearning_steps_minutes"] = tuple(values["relearning_steps_minutes"])
    return replace(DEFAULT_POLICY, **values)
