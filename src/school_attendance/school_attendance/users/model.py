from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class AdminUser:
    """Caller identity as stored in the Flask session after login.

    school_id is None for super admins, who act across all schools.
    """

    user_id: int
    role: Role
    school_id: Optional[int] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN
