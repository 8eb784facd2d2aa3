"""Queue a date range for every active employee and process it.

Usage: python scripts/backfill_cache.py 2024-01-01 2024-01-31 [--no-drain]
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_recalc.attendance_recalc.common.datetime_utils import parse_iso_date
from src.attendance_recalc.attendance_recalc.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description="Backfill the daily attendance cache")
    parser.add_argument("date_from", type=parse_iso_date)
    parser.add_argument("date_to", type=parse_iso_date)
    parser.add_argument("--no-drain", action="store_true", help="only queue, leave processing to the workers")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(asctime)s %(levelname)s %(message)s")
    container = build_container(db_config=dict(settings.DB_CONFIG), recalc_config=getattr(settings, "RECALC_CONFIG", None))

    employee_ids = container.employees_repo.list_active_ids()
    queued = container.queue_service.enqueue_employees(employee_ids, args.date_from, args.date_to)
    print(f"Queued {queued} day(s) for {len(employee_ids)} active employee(s)")

    if not args.no_drain:
        report = container.worker_factory().run_until_empty()
        print(f"Processed {report.claimed}: done={report.done} failed={report.failed} abandoned={report.abandoned}")


if __name__ == "__main__":
    main()
