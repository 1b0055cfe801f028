"""URL routing for the email queue admin API."""

from django.urls import path

from .views import (
    CreateHourlyJobsView,
    LivenessCheckView,
    ProcessAllView,
    ProcessPendingView,
    QueueHealthView,
    QueueStatsOverviewView,
    QueueStatsView,
    QueueUserView,
    ReadinessCheckView,
)

urlpatterns = [
    # Statistics
    path("stats", QueueStatsOverviewView.as_view(), name="email-queue-stats"),
    path("queue", QueueStatsView.as_view(), name="email-queue-queue"),
    # Manual triggers
    path("process-all", ProcessAllView.as_view(), name="email-queue-process-all"),
    path("queue-user", QueueUserView.as_view(), name="email-queue-queue-user"),
    path(
        "process-pending",
        ProcessPendingView.as_view(),
        name="email-queue-process-pending",
    ),
    path(
        "create-hourly-jobs",
        CreateHourlyJobsView.as_view(),
        name="email-queue-create-hourly-jobs",
    ),
    # Health
    path("health", QueueHealthView.as_view(), name="email-queue-health"),
    path("health/live", LivenessCheckView.as_view(), name="email-queue-health-live"),
    path("health/ready", ReadinessCheckView.as_view(), name="email-queue-health-ready"),
]
