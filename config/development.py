import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_db"),
}

# Recalculation queue / dispatcher tuning
RECALC_CONFIG = {
    "items_per_worker": int(os.getenv("RECALC_ITEMS_PER_WORKER", "10")),
    "max_parallel_workers": int(os.getenv("RECALC_MAX_PARALLEL_WORKERS", "20")),
    "worker_timeout_seconds": int(os.getenv("RECALC_WORKER_TIMEOUT_SECONDS", "50")),
    "stale_processing_minutes": int(os.getenv("RECALC_STALE_PROCESSING_MINUTES", "15")),
    "status_window_minutes": int(os.getenv("RECALC_STATUS_WINDOW_MINUTES", "15")),
    "lookback_days": int(os.getenv("RECALC_LOOKBACK_DAYS", "30")),
    "override_max_backdate_days": int(os.getenv("OVERRIDE_MAX_BACKDATE_DAYS", "60")),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
