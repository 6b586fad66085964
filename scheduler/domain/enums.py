from enum import Enum, IntEnum

from .errors import InvalidGrade


class Grade(IntEnum):
    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @classmethod
    def parse(cls, value) -> "Grade":
        """Map a boundary value (1-4 or a Grade) to a Grade, rejecting anything else."""
        if isinstance(value, bool):
            raise InvalidGrade(value)
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            raise InvalidGrade(value) from None

    @property
    def is_success(self) -> bool:
        return self in (Grade.GOOD, Grade.EASY)


GRADE_LABELS = {
    Grade.AGAIN: "again",
    Grade.HARD: "hard",
    Grade.GOOD: "good",
    Grade.EASY: "easy",
}


class MemoryState(str, Enum):
    """States understood by the memory model."""

    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"


class CardState(str, Enum):
    """Lifecycle of a card's schedule.

    New and Mastered are classifications layered on the memory model's
    Learning/Review states; ``memory_state`` gives the underlying one.
    """

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    MASTERED = "mastered"

    @property
    def memory_state(self):
        if self is CardState.NEW:
            return None
        if self is CardState.LEARNING:
            return MemoryState.LEARNING
        return MemoryState.REVIEW

    @property
    def is_reviewing(self) -> bool:
        return self in (CardState.REVIEW, CardState.MASTERED)


CARD_STATE_CHOICES = [(s.value, s.name.title()) for s in CardState]
