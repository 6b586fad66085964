class SchedulerError(Exception):
    """Base class for scheduling failures."""


class InvalidGrade(SchedulerError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"grade must be one of 1 (again), 2 (hard), 3 (good), 4 (easy); got {value!r}")


class ScheduleMissing(SchedulerError):
    def __init__(self, user_id, card_id):
        self.user_id = user_id
        self.card_id = card_id
        super().__init__(f"no schedule for card {card_id} of user {user_id}")


class ConcurrentModification(SchedulerError):
    """The schedule row changed between read and write."""


class ConsistencyViolation(SchedulerError):
    """A schedule mutation and its review event went out of step."""
