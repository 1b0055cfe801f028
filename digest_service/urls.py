"""Root URL configuration for the digest queue service."""

from django.urls import include, path

urlpatterns = [
    path("api/v1/email-queue/", include("email_queue.urls")),
]
