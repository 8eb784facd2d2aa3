"""Process the recalculation queue until nothing is pending.

Days cached while their shift was still running are re-queued first, so a
forgotten check-out turns into Punch Out Missing. Run it after the last shift
of the day ends (cron).

`--reset-stuck MINUTES` first returns items stuck in processing for longer
than MINUTES to pending. Only use it after checking the original worker is gone.
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

from src.attendance_recalc.attendance_recalc.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description="Drain the attendance recalculation queue")
    parser.add_argument("--reset-stuck", type=int, metavar="MINUTES", default=None)
    parser.add_argument("--status", action="store_true", help="print queue progress and stuck items, then exit")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(asctime)s %(levelname)s %(message)s")
    container = build_container(db_config=dict(settings.DB_CONFIG), recalc_config=getattr(settings, "RECALC_CONFIG", None))
    queue = container.queue_service

    if args.status:
        print(queue.progress().to_dict())
        for item in queue.stuck_items(container.stale_processing_minutes):
            print(f"stuck: id={item.item_id} employee={item.employee_id} date={item.work_date} since={item.started_at}")
        return

    if args.reset_stuck is not None:
        print(f"Reset {queue.reset_stuck(args.reset_stuck)} stuck item(s)")

    print(f"Re-queued {queue.enqueue_finished_shifts()} day(s) whose shift has ended")

    report = container.worker_factory().run_until_empty()
    print(f"Processed {report.claimed}: done={report.done} failed={report.failed} abandoned={report.abandoned}")


if __name__ == "__main__":
    main()
