from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body
from ..container import Container


def _template_dict(template) -> dict:
    return {
        "id": template.template_id,
        "name": template.name,
        "tz_string": template.tz_string,
        "buffer_time_minutes": template.buffer_minutes,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/hr/time-zones", methods=["GET"], endpoint="time_zones_list")
    def time_zones_list():
        return jsonify({"success": True, "data": [_template_dict(t) for t in container.shift_service.list_all()]})

    @app.route("/api/hr/time-zones/<int:template_id>", methods=["GET"], endpoint="time_zone_get")
    def time_zone_get(template_id: int):
        return jsonify({"success": True, "data": _template_dict(container.shift_service.get(template_id))})

    @app.route("/api/hr/time-zones/<int:template_id>", methods=["PUT"], endpoint="time_zone_update")
    def time_zone_update(template_id: int):
        data = json_body()
        template, days, fired = container.shift_service.save(
            template_id=template_id,
            name=data.get("name"),
            tz_string=data.get("tz_string"),
            buffer_minutes=data.get("buffer_time_minutes"),
        )
        return jsonify({"success": True, "data": _template_dict(template), "days_queued": days, "fired": fired})
