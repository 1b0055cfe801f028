"""Django settings for the digest queue service.

All deployment-specific values are read from environment variables so the
same image can run the web API, the RQ worker and the scheduler process.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-insecure-secret-key-change-me")
DEBUG = _env_bool("DJANGO_DEBUG", default=False)
ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
    if host.strip()
]

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
SERVICE_NAME = os.getenv("SERVICE_NAME", "digest-queue-service")

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "rest_framework",
    "django_rq",
    "email_queue",
]

MIDDLEWARE = [
    "email_queue.middleware.RequestIDMiddleware",
    "email_queue.middleware.ProcessTimeMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "digest_service.urls"
WSGI_APPLICATION = "digest_service.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DATABASE_NAME", "digest_queue"),
        "USER": os.getenv("DATABASE_USER", "postgres"),
        "PASSWORD": os.getenv("DATABASE_PASSWORD", ""),
        "HOST": os.getenv("DATABASE_HOST", "localhost"),
        "PORT": os.getenv("DATABASE_PORT", "5432"),
        "CONN_MAX_AGE": int(os.getenv("DATABASE_CONN_MAX_AGE", "60")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": REDIS_URL,
    }
}

RQ_QUEUES = {
    "default": {
        "URL": REDIS_URL,
        "DEFAULT_TIMEOUT": int(os.getenv("RQ_DEFAULT_TIMEOUT", "1800")),
        "ASYNC": _env_bool("RQ_ASYNC", default=True),
    },
}

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["email_queue.permissions.HasAdminToken"],
    "EXCEPTION_HANDLER": "email_queue.exceptions.custom_exception_handler",
    "UNAUTHENTICATED_USER": None,
}

USE_TZ = True
TIME_ZONE = "UTC"

# SMTP transport
EMAIL_HOST = os.getenv("EMAIL_HOST", "localhost")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
EMAIL_HOST_USER = os.getenv("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.getenv("EMAIL_HOST_PASSWORD", "")
EMAIL_USE_TLS = _env_bool("EMAIL_USE_TLS", default=True)
EMAIL_TIMEOUT = int(os.getenv("EMAIL_TIMEOUT", "30"))
DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", "notifications@example.com")
DEFAULT_FROM_NAME = os.getenv("DEFAULT_FROM_NAME", "Daily Insights")

# External content service
CONTENT_SERVICE_BASE_URL = os.getenv(
    "CONTENT_SERVICE_BASE_URL", "http://localhost:5000/api/v1/content"
)
CONTENT_SERVICE_TOKEN = os.getenv("CONTENT_SERVICE_TOKEN", "")
CONTENT_SERVICE_TIMEOUT = int(os.getenv("CONTENT_SERVICE_TIMEOUT", "30"))

# Email queue
EMAIL_QUEUE_ENABLED = _env_bool(
    "EMAIL_QUEUE_ENABLED",
    default=ENVIRONMENT in ("production", "staging")
    or _env_bool("FORCE_EMAIL_WORKERS"),
)
EMAIL_QUEUE_DEV_MODE = ENVIRONMENT not in ("production", "staging")
EMAIL_QUEUE = {
    "TIMEZONE": os.getenv("EMAIL_QUEUE_TIMEZONE", "Africa/Johannesburg"),
    "BATCH_SIZE": int(os.getenv("EMAIL_QUEUE_BATCH_SIZE", "20")),
    "INTER_BATCH_DELAY": float(os.getenv("EMAIL_QUEUE_INTER_BATCH_DELAY", "1.0")),
    "MAX_RETRIES": int(os.getenv("EMAIL_QUEUE_MAX_RETRIES", "3")),
    "RETENTION_DAYS": int(os.getenv("EMAIL_QUEUE_RETENTION_DAYS", "30")),
    "HOUR_TOLERANCE_MINUTES": int(
        os.getenv("EMAIL_QUEUE_HOUR_TOLERANCE_MINUTES", "5")
    ),
    "DISPATCH_INTERVAL": float(
        os.getenv(
            "EMAIL_QUEUE_DISPATCH_INTERVAL",
            "30" if EMAIL_QUEUE_DEV_MODE else "120",
        )
    ),
    "CLAIM_STALE_MINUTES": int(os.getenv("EMAIL_QUEUE_CLAIM_STALE_MINUTES", "30")),
    "MAX_JOBS_PER_PASS": int(os.getenv("EMAIL_QUEUE_MAX_JOBS_PER_PASS", "500")),
    "HEARTBEAT_INTERVAL": float(os.getenv("EMAIL_QUEUE_HEARTBEAT_INTERVAL", "30")),
}
EMAIL_QUEUE_ADMIN_TOKEN = os.getenv("EMAIL_QUEUE_ADMIN_TOKEN", "")

# structlog is configured by the app on startup; Django's dictConfig is skipped.
LOGGING_CONFIG = None
STRUCTURED_LOGGING = True
