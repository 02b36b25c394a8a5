"""JSON envelopes shared by every controller.

Success: {"success": true, ...payload}
Error:   {"success": false, "message": "...", ...extra}
"""

from __future__ import annotations

from typing import Any

from flask import jsonify

from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    DuplicateRecordError,
    NotFoundError,
    ResourceBusyError,
    ScheduleConflictError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicateRecordError, 409),
    (ResourceBusyError, 409),
)


def success_response(status_code: int = 200, message: str | None = None, **payload: Any):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    body.update(payload)
    return jsonify(body), status_code


def error_response(status_code: int, message: str, **extra: Any):
    body: dict[str, Any] = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status_code


def domain_error_response(exc: DomainError):
    """Translate a service-layer exception into its HTTP envelope."""
    if isinstance(exc, ScheduleConflictError):
        return error_response(409, str(exc), conflicts=[c.to_dict() for c in exc.conflicts])
    for exc_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, exc_type):
            return error_response(status_code, str(exc))
    return error_response(400, str(exc))
