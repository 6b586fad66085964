from rest_framework import serializers

from ..config import MAX_PREDICTION_STEPS
from ..domain.enums import GRADE_LABELS, Grade
from ..domain.errors import InvalidGrade
from ..services.stats import stats_range
from ..utils.time import get_clock, to_local_iso


def _grade_field(value):
    try:
        return Grade.parse(value)
    except InvalidGrade as exc:
        raise serializers.ValidationError(str(exc))


class ReviewInSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    card_id = serializers.UUIDField()
    rating = serializers.IntegerField()
    idempotency_key = serializers.CharField(max_length=64, required=False, allow_blank=True)

    def validate_rating(self, value):
        return _grade_field(value)


class DueQuerySerializer(serializers.Serializer):
    until = serializers.DateTimeField()  # ISO-8601


class PredictQuerySerializer(serializers.Serializer):
    grade = serializers.IntegerField(required=False, default=int(Grade.GOOD))
    steps = serializers.IntegerField(required=False, min_value=1, max_value=MAX_PREDICTION_STEPS)

    def validate_grade(self, value):
        return _grade_field(value)


class PurgeSerializer(serializers.Serializer):
    card_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)


class DailyStatsQuerySerializer(serializers.Serializer):
    from_date = serializers.DateField(required=False)
    to_date = serializers.DateField(required=False)

    def validate(self, attrs):
        try:
            from_date, to_date = stats_range(
                attrs.get("from_date"), attrs.get("to_date"), get_clock().today()
            )
        except ValueError as exc:
            raise serializers.ValidationError(str(exc))
        return {"from_date": from_date, "to_date": to_date}


def schedule_payload(card_id, schedule, tz):
    return {
        "card_id": str(card_id),
        "state": schedule.state.value,
        "stability": schedule.stability,
        "difficulty": schedule.difficulty,
        "review_count": schedule.review_count,
        "lapse_count": schedule.lapse_count,
        "learning_step": schedule.learning_step,
        "consecutive_good_count": schedule.consecutive_good_count,
        "due_at_utc": schedule.due_at.isoformat() if schedule.due_at else None,
        "due_at_local": to_local_iso(schedule.due_at, tz),
        "last_reviewed_at": schedule.last_reviewed_at.isoformat() if schedule.last_reviewed_at else None,
    }


def event_payload(event):
    grade = Grade(event.grade)
    return {
        "grade": int(grade),
        "grade_label": GRADE_LABELS[grade],
        "state_before": event.state_before,
        "graded_at": event.graded_at.isoformat(),
        "counts_toward_goal": event.counts_toward_goal,
    }
