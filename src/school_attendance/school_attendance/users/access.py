from __future__ import annotations

from typing import Optional

from ..core.exceptions import AuthorizationError
from .model import AdminUser


def require_school_access(user: AdminUser, school_id: int) -> None:
    """School admins may only touch records of their own school."""
    if user.is_super_admin:
        return
    if user.school_id is None or int(user.school_id) != int(school_id):
        raise AuthorizationError("Access denied for this school")


def scoped_school_id(user: AdminUser, requested: Optional[int] = None) -> Optional[int]:
    """School filter for listings: forced to the admin's school, optional for super admins."""
    if user.is_super_admin:
        return requested
    if user.school_id is None:
        raise AuthorizationError("No school assigned to this account")
    if requested is not None and int(requested) != int(user.school_id):
        raise AuthorizationError("Access denied for this school")
    return user.school_id
