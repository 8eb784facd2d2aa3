"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

TEMPLATE_ID_MIN = 1
TEMPLATE_ID_MAX = 50
TEMPLATE_SLOTS = 3
MAX_BUFFER_MINUTES = 240

DEFAULT_BUFFER_MINUTES = 30
DEFAULT_WORKING_DAY_START = time(10, 0)

# Punch attribution
EARLY_ARRIVAL_MINUTES = 120
DUPLICATE_SCAN_MINUTES = 5
MAX_SHIFT_HOURS = 12

# Recalculation queue
DEFAULT_ITEMS_PER_WORKER = 10
DEFAULT_MAX_PARALLEL_WORKERS = 200
DEFAULT_WORKER_TIMEOUT_SECONDS = 50
DEFAULT_STALE_PROCESSING_MINUTES = 15
DEFAULT_STATUS_WINDOW_MINUTES = 15
DEFAULT_RECALC_LOOKBACK_DAYS = 30

OVERRIDE_MAX_BACKDATE_DAYS = 60
ON_DEMAND_MAX_DAYS = 31
