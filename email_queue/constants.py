"""Constants used throughout the email queue application."""

# HTTP Headers
REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"
ADMIN_TOKEN_HEADER = "X-Admin-Token"

# Performance Thresholds
SLOW_REQUEST_THRESHOLD = 1.0  # Log requests slower than 1 second

# Worker liveness
ACTIVE_WORKER_WINDOW_SECONDS = 5 * 60
STALE_WORKER_ROW_HOURS = 24

# Scheduler wall-clock times (local to the queue timezone)
DAILY_STATS_HOUR = 0
DAILY_STATS_MINUTE = 5
CLEANUP_HOUR = 2
CLEANUP_MINUTE = 0

# Thread naming
WORKER_THREAD_PREFIX = "email-worker"

# Admin surface
DISABLED_MESSAGE = "Email queue is disabled in this environment"
PROCESSING_HISTORY_DAYS = 7
PROCESSING_HISTORY_CACHE_TTL = 300  # 5 minutes
PROCESSING_HISTORY_CACHE_KEY = "email_queue:processing_history"
