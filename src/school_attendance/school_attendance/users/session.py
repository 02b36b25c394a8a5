from __future__ import annotations

from functools import wraps

from flask import g, session

from ..common.responses import error_response
from ..core.enums import Role
from .model import AdminUser


def current_admin() -> AdminUser:
    return g.current_admin


def admin_required(view):
    """Require a logged-in super admin or school admin (login itself lives outside this service)."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response(401, "Authentication required")
        try:
            role = Role(session.get("role"))
        except ValueError:
            return error_response(403, "Access denied")

        school_id = session.get("school_id")
        g.current_admin = AdminUser(
            user_id=int(session["user_id"]),
            role=role,
            school_id=int(school_id) if school_id is not None else None,
        )
        return view(*args, **kwargs)

    return wrapper
