from __future__ import annotations

from flask import Flask, jsonify

from ..attendance.model import PunchLog
from ..common.http import json_body, parse_date, parse_datetime, parse_id_list
from ..common.validators import require_date_range
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/recalc/enqueue", methods=["POST"], endpoint="recalc_enqueue")
    def recalc_enqueue():
        data = json_body()
        employee_ids = parse_id_list(data.get("employee_ids"), "employee_ids")
        if data.get("employee_id") not in (None, ""):
            employee_ids += parse_id_list(data.get("employee_id"), "employee_id")
        if not employee_ids:
            raise ValidationError("employee_id or employee_ids is required")

        date_from = parse_date(data.get("date_from"), "date_from")
        date_to = parse_date(data.get("date_to"), "date_to") or date_from
        require_date_range(date_from, date_to)

        days = container.queue_service.enqueue_employees(employee_ids, date_from, date_to)
        drained = container.dispatcher.drain()
        return jsonify({"success": True, "days_queued": days, "fired": drained.fired})

    @app.route("/api/sync/punches", methods=["POST"], endpoint="sync_punches")
    def sync_punches():
        data = json_body()
        raw = data.get("punches")
        if not isinstance(raw, list) or not raw:
            raise ValidationError("punches must be a non-empty list")

        punches = []
        for index, p in enumerate(raw):
            if not isinstance(p, dict):
                raise ValidationError(f"punches[{index}] must be an object")
            employee_ids = parse_id_list(p.get("employee_id"), f"punches[{index}].employee_id")
            if len(employee_ids) != 1:
                raise ValidationError(f"punches[{index}].employee_id is required")
            punches.append(
                PunchLog(
                    log_id=int(p.get("log_id") or 0),
                    employee_id=employee_ids[0],
                    punch_time=parse_datetime(p.get("punch_time"), f"punches[{index}].punch_time"),
                )
            )

        days = container.queue_service.enqueue_punches(punches)
        drained = container.dispatcher.drain()
        return jsonify({"success": True, "days_queued": days, "fired": drained.fired})

    @app.route("/api/sync/burst-drain", methods=["POST"], endpoint="sync_burst_drain")
    def sync_burst_drain():
        data = json_body()
        max_workers = data.get("max_workers")
        if max_workers not in (None, ""):
            try:
                max_workers = int(max_workers)
            except (TypeError, ValueError):
                raise ValidationError("max_workers must be an integer")
        else:
            max_workers = None

        requeued = container.queue_service.enqueue_finished_shifts()
        result = container.dispatcher.drain(max_workers)
        return jsonify({"success": True, "requeued": requeued, **result.to_dict()})

    @app.route("/api/sync/queue-status", methods=["GET"], endpoint="sync_queue_status")
    def sync_queue_status():
        progress = container.queue_service.progress()
        stuck = container.queue_service.stuck_items(container.stale_processing_minutes)
        response = jsonify({**progress.to_dict(), "stuck": len(stuck)})
        response.headers["Cache-Control"] = "no-store"
        return response

    @app.route("/api/sync/process-queue", methods=["POST"], endpoint="sync_process_queue")
    def sync_process_queue():
        report = container.worker_factory().run_once()
        return jsonify({"success": True, **report.to_dict()})
