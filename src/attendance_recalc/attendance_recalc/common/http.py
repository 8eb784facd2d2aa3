from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from flask import request

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_date(value: Any, field_name: str) -> Optional[date]:
    if value in (None, ""):
        return None
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def parse_datetime(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).strip().replace("T", " "))
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO datetime")


def parse_id_list(value: Any, field_name: str) -> List[int]:
    """Accept [1, 2], "1,2" or a single id."""
    if value in (None, ""):
        return []
    if isinstance(value, (list, tuple)):
        raw = list(value)
    else:
        raw = [part for part in str(value).split(",") if part.strip()]
    try:
        return [int(str(v).strip()) for v in raw]
    except ValueError:
        raise ValidationError(f"{field_name} must be a list of integer ids")


def query_id_list(name: str) -> List[int]:
    values = request.args.getlist(name) or request.args.getlist(f"{name}[]")
    ids: List[int] = []
    for value in values:
        ids.extend(parse_id_list(value, name))
    return ids
