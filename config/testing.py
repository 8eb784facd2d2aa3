import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_test"),
}

RECALC_CONFIG = {
    "items_per_worker": 10,
    "max_parallel_workers": 4,
    "worker_timeout_seconds": 50,
    "stale_processing_minutes": 15,
    "status_window_minutes": 15,
    "lookback_days": 30,
    "override_max_backdate_days": 60,
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
