from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body
from ..container import Container
from .model import BUFFER_TIME_KEY, WORKING_DAY_ENABLED_KEY, WORKING_DAY_START_KEY


def register(app: Flask, container: Container) -> None:
    @app.route("/api/hr/company-settings", methods=["GET"], endpoint="company_settings_get")
    def company_settings_get():
        return jsonify({"success": True, "data": container.settings_service.get().to_dict()})

    @app.route("/api/hr/company-settings", methods=["POST"], endpoint="company_settings_update")
    def company_settings_update():
        data = json_body()
        settings = container.settings_service.update(
            buffer_time_minutes=data.get(BUFFER_TIME_KEY),
            working_day_start=data.get(WORKING_DAY_START_KEY),
            working_day_enabled=data.get(WORKING_DAY_ENABLED_KEY),
        )
        return jsonify({"success": True, "data": settings.to_dict()})
