from dataclasses import dataclass
from datetime import datetime

from .. import config
from .enums import CardState, Grade
from .logic import Schedule, schedule_next


@dataclass(frozen=True)
class PredictedStep:
    step: int
    due_at: datetime
    state: CardState


def predict_schedule(
    schedule: Schedule,
    now: datetime,
    *,
    model,
    grade=Grade.GOOD,
    steps: int = config.DEFAULT_PREDICTION_STEPS,
    policy=config.DEFAULT_POLICY,
    tz=None,
):
    """Simulate ``steps`` reviews with a fixed grade, each one at the previous due date.

    Runs the live transition rules, so step k matches k real gradings made
    at the same instants. Nothing is persisted.
    """
    grade = Grade.parse(grade)
    if steps < 1:
        raise ValueError("steps must be at least 1")

    kwargs = dict(model=model, policy=policy)
    if tz is not None:
        kwargs["tz"] = tz

    predicted = []
    current, at = schedule, now
    for step in range(1, steps + 1):
        current = schedule_next(current, grade, at, **kwargs).schedule
        predicted.append(PredictedStep(step=step, due_at=current.due_at, state=current.state))
        at = current.due_at
    return predicted
