from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .core.exceptions import DataIntegrityError, DomainError, NotFoundError, ValidationError
from .database.bootstrap import apply_schema, list_tables

from .container import build_container
from .calculations.controller import register as register_calculations
from .recalc.controller import register as register_recalc
from .schedules.controller import register as register_schedules
from .settings.controller import register as register_settings
from .shifts.controller import register as register_shifts

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def register_error_handlers(app: Flask) -> None:
    def failure(error: Exception, status: int):
        return jsonify({"success": False, "message": str(error)}), status

    @app.errorhandler(ValidationError)
    def handle_validation(e: ValidationError):
        return failure(e, 400)

    @app.errorhandler(NotFoundError)
    def handle_not_found(e: NotFoundError):
        return failure(e, 404)

    @app.errorhandler(DataIntegrityError)
    def handle_integrity(e: DataIntegrityError):
        return failure(e, 409)

    @app.errorhandler(DomainError)
    def handle_domain(e: DomainError):
        return failure(e, 400)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return failure(e, e.code or 500)
        logger.exception("Unhandled error")
        return jsonify({"success": False, "message": "Internal server error"}), 500


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

    container = build_container(db_config=db_config, recalc_config=getattr(settings, "RECALC_CONFIG", None))

    register_error_handlers(app)
    register_calculations(app, container)
    register_recalc(app, container)
    register_schedules(app, container)
    register_shifts(app, container)
    register_settings(app, container)

    return app
