from rest_framework import views, status
from rest_framework.generics import get_object_or_404
from rest_framework.response import Response
from django.contrib.auth import get_user_model
import structlog
import uuid
from ..data.repos import due_card_ids
from ..services.reviews import (
    get_card_schedule,
    predict_card_schedule,
    purge,
    record_review,
    reset_card,
)
from ..services.stats import daily_stats, learning_progress, weekly_stats
from ..services.streaks import progress_summary
from ..utils.time import get_clock, to_local_iso
from .serializers import (
    DailyStatsQuerySerializer,
    DueQuerySerializer,
    PredictQuerySerializer,
    PurgeSerializer,
    ReviewInSerializer,
    event_payload,
    schedule_payload,
)

base_logger = structlog.get_logger()


class LoggedView(views.APIView):
    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        # Create a unique request_id
        self.logger = base_logger.bind(request_id=str(uuid.uuid4()))


class ReviewView(LoggedView):
    def post(self, request):
        s = ReviewInSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        user_id = s.validated_data["user_id"]
        card_id = s.validated_data["card_id"]
        grade = s.validated_data["rating"]
        idem = s.validated_data.get("idempotency_key") or None

        schedule, event, was_idem = record_review(user_id, card_id, grade, idem)
        status_code = status.HTTP_200_OK if was_idem else status.HTTP_201_CREATED
        tz = get_clock().tz

        # Log with request_id & relevant context
        self.logger.info(
            "review_api_response",
            user_id=str(user_id),
            card_id=str(card_id),
            grade=int(grade),
            idempotent=was_idem,
            state=schedule.state.value,
            due_at_utc=schedule.due_at.isoformat(),
            due_at_local=to_local_iso(schedule.due_at, tz),
            status=status_code,
        )

        return Response(
            {
                **schedule_payload(card_id, schedule, tz),
                **event_payload(event),
                "idempotent": was_idem,
            },
            status=status_code,
        )


class DueCardsView(LoggedView):
    def get(self, request, user_id):
        qs = DueQuerySerializer(data=request.query_params)
        qs.is_valid(raise_exception=True)
        until = qs.validated_data["until"]
        tz = get_clock().tz

        results = due_card_ids(user_id, until)

        self.logger.info(
            "due_cards_api_response",
            user_id=str(user_id),
            until_utc=until.isoformat(),
            until_local=to_local_iso(until, tz),
            card_count=len(results),
        )

        return Response(
            {
                "user_id": str(user_id),
                "until_utc": until.isoformat(),
                "until_local": to_local_iso(until, tz),
                "card_ids": [str(card_id) for card_id in results],
            }
        )


class CardScheduleView(LoggedView):
    def get(self, request, user_id, card_id):
        schedule = get_card_schedule(user_id, card_id)
        self.logger.info("schedule_api_response", user_id=str(user_id), card_id=str(card_id),
                         state=schedule.state.value)
        return Response(schedule_payload(card_id, schedule, get_clock().tz))


class PredictedScheduleView(LoggedView):
    def get(self, request, user_id, card_id):
        qs = PredictQuerySerializer(data=request.query_params)
        qs.is_valid(raise_exception=True)

        steps = predict_card_schedule(
            user_id, card_id,
            grade=qs.validated_data["grade"],
            steps=qs.validated_data.get("steps"),
        )
        tz = get_clock().tz

        self.logger.info("predicted_schedule_api_response", user_id=str(user_id),
                         card_id=str(card_id), steps=len(steps))
        return Response(
            [
                {
                    "step": p.step,
                    "due_at_utc": p.due_at.isoformat(),
                    "due_at_local": to_local_iso(p.due_at, tz),
                    "state": p.state.value,
                }
                for p in steps
            ]
        )


class ResetCardView(LoggedView):
    def post(self, request, user_id, card_id):
        schedule = reset_card(user_id, card_id)
        self.logger.info("reset_api_response", user_id=str(user_id), card_id=str(card_id))
        return Response(schedule_payload(card_id, schedule, get_clock().tz))


class PurgeCardsView(LoggedView):
    def post(self, request, user_id):
        s = PurgeSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        schedules, events = purge(user_id, s.validated_data["card_ids"])

        self.logger.info("purge_api_response", user_id=str(user_id),
                         schedules_deleted=schedules, events_deleted=events)
        return Response({"schedules_deleted": schedules, "events_deleted": events})


class ProgressView(LoggedView):
    def get(self, request, user_id):
        user = get_object_or_404(get_user_model(), pk=user_id)
        summary = progress_summary(user)
        self.logger.info("progress_api_response", user_id=str(user_id), **summary)
        return Response(summary)


class WeeklyStatsView(LoggedView):
    def get(self, request, user_id):
        days = weekly_stats(user_id)
        self.logger.info("weekly_stats_api_response", user_id=str(user_id),
                         goal_reviews=sum(d["goal_reviews_count"] for d in days))
        return Response(days)


class DailyStatsView(LoggedView):
    def get(self, request, user_id):
        qs = DailyStatsQuerySerializer(data=request.query_params)
        qs.is_valid(raise_exception=True)

        days = daily_stats(
            user_id,
            from_date=qs.validated_data.get("from_date"),
            to_date=qs.validated_data.get("to_date"),
        )
        self.logger.info("daily_stats_api_response", user_id=str(user_id), days=len(days))
        return Response(days)


class LearningProgressView(LoggedView):
    def get(self, request, user_id):
        counts = learning_progress(user_id)
        self.logger.info("learning_progress_api_response", user_id=str(user_id), **counts)
        return Response(counts)
