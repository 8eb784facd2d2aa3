from __future__ import annotations

from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request

from ..common.http import json_body, parse_date, parse_id_list, query_id_list
from ..core.constants import TEMPLATE_SLOTS
from ..core.exceptions import ValidationError
from ..container import Container


def _slots(data: Dict[str, Any], prefix: str) -> List[Optional[Any]]:
    """`template_ids: [..]` or the flat `<prefix>1..3` form."""
    if "template_ids" in data:
        value = data["template_ids"]
        if not isinstance(value, list):
            raise ValidationError("template_ids must be a list")
        return value
    return [data.get(f"{prefix}{slot}") for slot in range(1, TEMPLATE_SLOTS + 1)]


def register(app: Flask, container: Container) -> None:
    @app.route("/api/hr/schedule-overrides", methods=["GET"], endpoint="schedule_overrides_list")
    def schedule_overrides_list():
        overrides = container.override_service.list_active(query_id_list("employee_ids") or None)
        return jsonify({"success": True, "data": [o.to_dict() for o in overrides]})

    @app.route("/api/hr/schedule-overrides", methods=["POST"], endpoint="schedule_overrides_apply")
    def schedule_overrides_apply():
        data = json_body()
        employee_ids = parse_id_list(data.get("employee_ids"), "employee_ids")
        if data.get("employee_id") not in (None, ""):
            employee_ids += parse_id_list(data.get("employee_id"), "employee_id")

        changes = container.override_service.apply(
            employee_ids=employee_ids,
            template_id=data.get("template_id"),
            active_from=parse_date(data.get("active_from"), "active_from"),
            active_until=parse_date(data.get("active_until"), "active_until"),
            label=data.get("label"),
        )
        return jsonify({
            "success": True,
            "data": [c.override.to_dict() for c in changes],
            "days_queued": sum(c.days_queued for c in changes),
            "fired": changes[0].fired if changes else 0,
        }), 201

    @app.route("/api/hr/schedule-overrides", methods=["DELETE"], endpoint="schedule_overrides_revert")
    def schedule_overrides_revert():
        data = json_body()
        raw = data.get("employee_id", request.args.get("employee_id"))
        employee_ids = parse_id_list(raw, "employee_id")
        if len(employee_ids) != 1:
            raise ValidationError("employee_id is required")

        change = container.override_service.revert(employee_id=employee_ids[0])
        return jsonify({
            "success": True,
            "data": change.override.to_dict(),
            "days_queued": change.days_queued,
            "fired": change.fired,
        })

    @app.route("/api/hr/schedules/<int:department_id>", methods=["PUT"], endpoint="department_schedule_update")
    def department_schedule_update(department_id: int):
        days, fired = container.schedule_service.set_department_schedule(department_id, _slots(json_body(), "tz_id_"))
        return jsonify({"success": True, "days_queued": days, "fired": fired})

    @app.route("/api/hr/employee-schedule/<int:employee_id>", methods=["PUT"], endpoint="employee_schedule_update")
    def employee_schedule_update(employee_id: int):
        days, fired = container.schedule_service.assign_individual(employee_id, _slots(json_body(), "individual_tz_"))
        return jsonify({"success": True, "days_queued": days, "fired": fired})
