"""
Role-based authorization.

Roles map onto a fixed permission set. Routes declare what they need with
the ``require_permission`` / ``require_roles`` dependencies; the claims come
from ``request.state.user`` populated by the authentication middleware.
"""

import logging
from enum import Enum
from typing import Callable, Optional, Set

from fastapi import HTTPException, Request, status

from core.security import AuthenticatedUser
from database.models.users import UserRole as Role

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    """System-wide permissions."""

    # Jobs
    JOB_CREATE = "job:create"
    JOB_UPDATE = "job:update"
    JOB_DELETE = "job:delete"
    JOB_PUBLISH = "job:publish"
    JOB_ANALYTICS = "job:analytics"

    # Career applications
    APPLICATION_READ = "application:read"
    APPLICATION_UPDATE = "application:update"
    APPLICATION_DELETE = "application:delete"

    # Interview pipeline
    CANDIDATE_CREATE = "candidate:create"
    CANDIDATE_READ = "candidate:read"
    CANDIDATE_UPDATE = "candidate:update"
    INTERVIEW_SCHEDULE = "interview:schedule"
    INTERVIEW_FEEDBACK = "interview:feedback"
    OFFER_MANAGE = "offer:manage"

    # Users
    PROFILE_MANAGE = "profile:manage"
    USER_MANAGE = "user:manage"


_STAFF_PERMISSIONS: Set[Permission] = {
    Permission.JOB_CREATE, Permission.JOB_UPDATE, Permission.JOB_DELETE,
    Permission.JOB_PUBLISH, Permission.JOB_ANALYTICS,
    Permission.CANDIDATE_CREATE, Permission.CANDIDATE_READ,
    Permission.CANDIDATE_UPDATE, Permission.INTERVIEW_SCHEDULE,
    Permission.INTERVIEW_FEEDBACK, Permission.OFFER_MANAGE,
    Permission.PROFILE_MANAGE,
}

ROLE_PERMISSIONS: dict[Role, Set[Permission]] = {
    Role.USER: set(_STAFF_PERMISSIONS),
    Role.MANAGER: _STAFF_PERMISSIONS | {
        Permission.APPLICATION_READ,
        Permission.APPLICATION_UPDATE,
    },
    Role.ADMIN: set(Permission),
}


def get_user_permissions(role: str) -> Set[Permission]:
    """Permissions granted to a role; unknown roles get none."""
    try:
        return ROLE_PERMISSIONS[Role(role)]
    except ValueError:
        logger.warning(f"Unknown role encountered: {role}")
        return set()


def has_permission(user: AuthenticatedUser, permission: Permission) -> bool:
    return permission in get_user_permissions(user.role)


def _current_user(request: Request) -> AuthenticatedUser:
    user: Optional[AuthenticatedUser] = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_permission(*required_permissions: Permission) -> Callable:
    """
    Dependency requiring every listed permission.

    Returns the authenticated user so routes can use it directly:

        user = Depends(require_permission(Permission.OFFER_MANAGE))
    """
    async def dependency(request: Request) -> AuthenticatedUser:
        user = _current_user(request)
        missing = [p for p in required_permissions if not has_permission(user, p)]
        if missing:
            logger.warning(
                f"User {user.id} with role {user.role} denied "
                f"{', '.join(p.value for p in missing)}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return dependency


def require_roles(*allowed_roles: Role) -> Callable:
    """
    Dependency to require one of the given roles.

    Args:
        allowed_roles: Allowed roles

    Returns:
        FastAPI dependency
    """
    allowed = {role.value for role in allowed_roles}

    async def dependency(request: Request) -> AuthenticatedUser:
        user = _current_user(request)
        if user.role not in allowed:
            logger.warning(
                f"User {user.id} with role {user.role} attempted action "
                f"requiring roles: {', '.join(sorted(allowed))}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {' or '.join(sorted(allowed))}",
            )
        return user

    return dependency
