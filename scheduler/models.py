from .data.models import CardSchedule, ReviewEvent

__all__ = ["CardSchedule", "ReviewEvent"]
