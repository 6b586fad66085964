"""
Memory-model calculator.

The lifecycle state machine talks to the numeric memory model only through
``MemoryModel.apply``. The default implementation delegates to the FSRS
scheduler from the ``fsrs`` package; any object with the same ``apply``
signature can be plugged in through the ``MEMORY_MODEL`` setting.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol

from fsrs import Card, Rating, Scheduler, State

from .. import config
from .enums import Grade, MemoryState


@dataclass(frozen=True)
class MemoryInput:
    stability: Optional[float]
    difficulty: Optional[float]
    review_count: int
    lapse_count: int
    last_reviewed_at: Optional[datetime]
    due_at: Optional[datetime]
    memory_state: MemoryState

    @property
    def is_empty(self) -> bool:
        return self.stability is None


@dataclass(frozen=True)
class MemoryOutput:
    stability: float
    difficulty: float
    due_at: datetime
    memory_state: MemoryState
    review_count: int
    lapse_count: int


class MemoryModel(Protocol):
    def apply(self, current: MemoryInput, grade: Grade, now: datetime) -> MemoryOutput:
        ...


_TO_FSRS_STATE = {
    MemoryState.LEARNING: State.Learning,
    MemoryState.REVIEW: State.Review,
    MemoryState.RELEARNING: State.Relearning,
}
_FROM_FSRS_STATE = {v: k for k, v in _TO_FSRS_STATE.items()}


def _utc(moment):
    # fsrs only accepts datetimes in timezone.utc
    return moment.astimezone(timezone.utc) if moment is not None else None


class FsrsMemoryModel:
    """FSRS with deterministic intervals.

    Learning steps are empty: graduation out of Learning is decided by the
    lifecycle rules, so any call made on a Learning card yields Review
    parameters. Relearning steps stay non-empty so that Again on a Review
    card is reported as Relearning.
    """

    def __init__(
        self,
        desired_retention=config.DESIRED_RETENTION,
        maximum_interval_days=config.MAXIMUM_INTERVAL_DAYS,
        relearning_steps=None,
        parameters=None,
    ):
        if relearning_steps is None:
            relearning_steps = config.DEFAULT_POLICY.relearning_steps
        if not relearning_steps:
            raise ValueError("relearning_steps must not be empty")
        kwargs = dict(
            desired_retention=desired_retention,
            learning_steps=(),
            relearning_steps=tuple(relearning_steps),
            maximum_interval=maximum_interval_days,
            enable_fuzzing=False,
        )
        if parameters is not None:
            kwargs["parameters"] = tuple(parameters)
        self._scheduler = Scheduler(**kwargs)

    @classmethod
    def from_policy(cls, policy):
        return cls(
            desired_retention=policy.desired_retention,
            maximum_interval_days=policy.maximum_interval_days,
            relearning_steps=policy.relearning_steps,
        )

    def _to_card(self, current: MemoryInput, now: datetime) -> Card:
        if current.is_empty:
            return Card(card_id=0, state=State.Learning, step=0, due=_utc(now))
        state = _TO_FSRS_STATE[current.memory_state]
        return Card(
            card_id=0,
            state=state,
            step=None if state == State.Review else 0,
            stability=current.stability,
            difficulty=current.difficulty,
            due=_utc(current.due_at or now),
            last_review=_utc(current.last_reviewed_at),
        )

    def apply(self, current: MemoryInput, grade, now: datetime) -> MemoryOutput:
        grade = Grade.parse(grade)
        if current.memory_state not in (MemoryState.LEARNING, MemoryState.REVIEW):
            raise ValueError(f"memory model cannot start from {current.memory_state!r}")

        card, _ = self._scheduler.review_card(
            self._to_card(current, now), Rating(int(grade)), review_datetime=_utc(now)
        )

        # A lapsed card may keep its difficulty while its stability starts over
        difficulty = card.difficulty
        if current.is_empty and current.difficulty is not None:
            difficulty = current.difficulty

        lapsed = grade is Grade.AGAIN and current.memory_state is MemoryState.REVIEW
        return MemoryOutput(
            stability=card.stability,
            difficulty=difficulty,
            due_at=card.due,
            memory_state=_FROM_FSRS_STATE[card.state],
            review_count=current.review_count + 1,
            lapse_count=current.lapse_count + (1 if lapsed else 0),
        )


def build_memory_model(policy=None) -> MemoryModel:
    """Instantiate the configured strategy class."""
    from django.utils.module_loading import import_string

    policy = policy or config.load_policy()
    model_cls = import_string(policy.memory_model)
    if hasattr(model_cls, "from_policy"):
        return model_cls.from_policy(policy)
    return model_cls()
