from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceCalculator
from .calculations.mysql_calculation_repository import MySQLCalculationRepository
from .calculations.service import CalculationService
from .core.constants import (
    DEFAULT_ITEMS_PER_WORKER,
    DEFAULT_MAX_PARALLEL_WORKERS,
    DEFAULT_RECALC_LOOKBACK_DAYS,
    DEFAULT_STALE_PROCESSING_MINUTES,
    DEFAULT_STATUS_WINDOW_MINUTES,
    DEFAULT_WORKER_TIMEOUT_SECONDS,
    OVERRIDE_MAX_BACKDATE_DAYS,
)
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .recalc.dispatcher import QueueDrainDispatcher, ThreadWorkerLauncher
from .recalc.mysql_queue_repository import MySQLRecalcQueueRepository
from .recalc.service import RecalcQueueService
from .recalc.worker import RecalcWorker
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.resolver import ScheduleResolver
from .schedules.service import OverrideService, ScheduleService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.service import SettingsService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.service import ShiftService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    shifts_repo: MySQLShiftRepository
    schedules_repo: MySQLScheduleRepository
    attendance_repo: MySQLAttendanceRepository
    calculations_repo: MySQLCalculationRepository
    queue_repo: MySQLRecalcQueueRepository
    settings_repo: MySQLSettingsRepository

    settings_service: SettingsService
    resolver: ScheduleResolver
    calculator: AttendanceCalculator
    calculation_service: CalculationService
    queue_service: RecalcQueueService
    dispatcher: QueueDrainDispatcher
    worker_factory: Callable[[], RecalcWorker]
    override_service: OverrideService
    schedule_service: ScheduleService
    shift_service: ShiftService

    stale_processing_minutes: int = DEFAULT_STALE_PROCESSING_MINUTES


def build_container(*, db_config: dict, recalc_config: Optional[dict] = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)
    recalc = dict(recalc_config or {})

    employees_repo = MySQLEmployeeRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    calculations_repo = MySQLCalculationRepository(conn)
    queue_repo = MySQLRecalcQueueRepository(conn)
    settings_repo = MySQLSettingsRepository(conn)

    settings_service = SettingsService(settings_repo)
    resolver = ScheduleResolver(employees=employees_repo, schedules=schedules_repo, shifts=shifts_repo)
    calculator = AttendanceCalculator(resolver=resolver, sources=attendance_repo, settings=settings_service)
    calculation_service = CalculationService(calculations_repo, calculator)
    queue_service = RecalcQueueService(
        queue_repo,
        calculations=calculations_repo,
        status_window_minutes=int(recalc.get("status_window_minutes", DEFAULT_STATUS_WINDOW_MINUTES)),
    )

    items_per_worker = int(recalc.get("items_per_worker", DEFAULT_ITEMS_PER_WORKER))
    worker_timeout = float(recalc.get("worker_timeout_seconds", DEFAULT_WORKER_TIMEOUT_SECONDS))

    def worker_factory() -> RecalcWorker:
        return RecalcWorker(
            queue_service,
            calculation_service,
            batch_size=items_per_worker,
            timeout_seconds=worker_timeout,
        )

    dispatcher = QueueDrainDispatcher(
        queue_service,
        ThreadWorkerLauncher(worker_factory),
        items_per_worker=items_per_worker,
        max_workers=int(recalc.get("max_parallel_workers", DEFAULT_MAX_PARALLEL_WORKERS)),
    )

    lookback_days = int(recalc.get("lookback_days", DEFAULT_RECALC_LOOKBACK_DAYS))
    override_service = OverrideService(
        schedules=schedules_repo,
        employees=employees_repo,
        shifts=shifts_repo,
        queue=queue_service,
        dispatcher=dispatcher,
        max_backdate_days=int(recalc.get("override_max_backdate_days", OVERRIDE_MAX_BACKDATE_DAYS)),
    )
    schedule_service = ScheduleService(
        schedules=schedules_repo,
        employees=employees_repo,
        shifts=shifts_repo,
        queue=queue_service,
        dispatcher=dispatcher,
        lookback_days=lookback_days,
    )
    shift_service = ShiftService(
        shifts_repo,
        employees=employees_repo,
        queue=queue_service,
        dispatcher=dispatcher,
        lookback_days=lookback_days,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        shifts_repo=shifts_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        calculations_repo=calculations_repo,
        queue_repo=queue_repo,
        settings_repo=settings_repo,
        settings_service=settings_service,
        resolver=resolver,
        calculator=calculator,
        calculation_service=calculation_service,
        queue_service=queue_service,
        dispatcher=dispatcher,
        worker_factory=worker_factory,
        override_service=override_service,
        schedule_service=schedule_service,
        shift_service=shift_service,
        stale_processing_minutes=int(recalc.get("stale_processing_minutes", DEFAULT_STALE_PROCESSING_MINUTES)),
    )
