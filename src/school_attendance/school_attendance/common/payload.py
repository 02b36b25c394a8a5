"""Helpers for reading JSON request bodies and query strings.

Keys are snake_case; the camelCase spelling of the older API is accepted too.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional

from flask import request

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date, parse_iso_datetime


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def json_body() -> dict:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def field(source: Mapping[str, Any], name: str, default: Any = None) -> Any:
    if name in source:
        return source[name]
    return source.get(_camel(name), default)


def optional_date(source: Mapping[str, Any], name: str) -> Optional[date]:
    value = field(source, name)
    if value in (None, ""):
        return None
    try:
        return parse_iso_date(str(value)[:10])
    except ValueError:
        raise ValidationError(f"{name} must be a date (YYYY-MM-DD)") from None


def required_date(source: Mapping[str, Any], name: str) -> date:
    value = optional_date(source, name)
    if value is None:
        raise ValidationError(f"{name} is required")
    return value


def optional_datetime(source: Mapping[str, Any], name: str) -> Optional[datetime]:
    value = field(source, name)
    if value in (None, ""):
        return None
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 timestamp") from None


def optional_int(source: Mapping[str, Any], name: str) -> Optional[int]:
    value = field(source, name)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer") from None


def optional_bool(source: Mapping[str, Any], name: str) -> Optional[bool]:
    value = field(source, name)
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if str(value).lower() in {"1", "true", "yes"}:
        return True
    if str(value).lower() in {"0", "false", "no"}:
        return False
    raise ValidationError(f"{name} must be a boolean")
