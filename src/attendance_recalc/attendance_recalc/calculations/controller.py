from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import parse_date, query_id_list
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/calculations", methods=["GET"], endpoint="calculations_range")
    def calculations_range():
        result = container.calculation_service.read_range(
            query_id_list("employee_ids"),
            parse_date(request.args.get("date_from"), "date_from"),
            parse_date(request.args.get("date_to"), "date_to"),
        )
        return jsonify({"success": True, **result.to_dict()})

    @app.route("/api/employees/<int:employee_id>/calculations", methods=["GET"], endpoint="employee_calculations")
    def employee_calculations(employee_id: int):
        rows = container.calculation_service.read_employee(
            employee_id,
            parse_date(request.args.get("date_from"), "date_from"),
            parse_date(request.args.get("date_to"), "date_to"),
        )
        return jsonify({"success": True, "data": [row.to_dict() for row in rows]})
