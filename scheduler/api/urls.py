from django.urls import path
from .views import (
    CardScheduleView,
    DailyStatsView,
    DueCardsView,
    LearningProgressView,
    PredictedScheduleView,
    ProgressView,
    PurgeCardsView,
    ResetCardView,
    ReviewView,
    WeeklyStatsView,
)

urlpatterns = [
    path("reviews", ReviewView.as_view(), name="review"),
    path("users/<uuid:user_id>/due-cards", DueCardsView.as_view(), name="due-cards"),
    path("users/<uuid:user_id>/cards/purge", PurgeCardsView.as_view(), name="purge-cards"),
    path("users/<uuid:user_id>/cards/<uuid:card_id>/schedule", CardScheduleView.as_view(), name="card-schedule"),
    path("users/<uuid:user_id>/cards/<uuid:card_id>/predicted-schedule", PredictedScheduleView.as_view(), name="predicted-schedule"),
    path("users/<uuid:user_id>/cards/<uuid:card_id>/reset", ResetCardView.as_view(), name="reset-card"),
    path("users/<uuid:user_id>/progress", ProgressView.as_view(), name="progress"),
    path("users/<uuid:user_id>/stats/weekly", WeeklyStatsView.as_view(), name="weekly-stats"),
    path("users/<uuid:user_id>/stats/daily", DailyStatsView.as_view(), name="daily-stats"),
    path("users/<uuid:user_id>/stats/learning-progress", LearningProgressView.as_view(), name="learning-progress"),
]
