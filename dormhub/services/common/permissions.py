# dormhub/services/common/permissions.py
"""
Permission and authorization utilities.

Every service call receives a resolved ``Principal``; role checks gate
which workflows the caller may run.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from dormhub.schemas.common.enums import UserRole

from .errors import AuthorizationError


class PermissionDenied(AuthorizationError):
    """Raised when a user lacks a required role."""

    def __init__(
        self,
        message: str,
        user_id: Optional[int] = None,
        role: Optional[UserRole] = None,
    ) -> None:
        super().__init__(message, details={"role": role.value if role else None})
        self.user_id = user_id
        self.role = role


@dataclass(frozen=True)
class Principal:
    """
    Represents an authenticated user in the service layer.

    Attributes:
        user_id: Account identifier
        role: Account role
    """
    user_id: int
    role: UserRole

    def has_any_role(self, roles: Iterable[UserRole]) -> bool:
        return self.role in set(roles)


def require_role(
    principal: Principal,
    allowed_roles: Iterable[UserRole],
    *,
    error_message: Optional[str] = None,
) -> None:
    """
    Assert that principal has one of the allowed roles.

    Raises:
        PermissionDenied: If principal lacks required role

    Example:
        >>> require_role(principal, [UserRole.ADMIN])
    """
    allowed_roles = list(allowed_roles)
    if not principal.has_any_role(allowed_roles):
        roles_str = ", ".join(r.value for r in allowed_roles)
        msg = error_message or (
            f"User {principal.user_id} with role '{principal.role.value}' "
            f"does not have one of required roles: {roles_str}"
        )
        raise PermissionDenied(msg, user_id=principal.user_id, role=principal.role)


def require_admin(principal: Principal) -> None:
    require_role(principal, [UserRole.ADMIN], error_message="Admin access required")


def require_student(principal: Principal) -> None:
    require_role(principal, [UserRole.STUDENT], error_message="Student access required")
