"""FastAPI dependencies for dependency injection."""

from typing import Optional

from fastapi import Depends, HTTPException, Query, Request, status

from api.schemas.common import PaginationParams
from core.middleware.authorization import Role, require_roles
from core.security import AuthenticatedUser

MAX_PAGE_SIZE = 100


async def get_current_user(request: Request) -> Optional[AuthenticatedUser]:
    """
    Claims of the caller, set by the authentication middleware.
    Returns None for anonymous requests.
    """
    return getattr(request.state, "user", None)


async def require_authenticated_user(
    current_user: Optional[AuthenticatedUser] = Depends(get_current_user),
) -> AuthenticatedUser:
    """Require user to be authenticated."""
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user


# Role gates
require_manager = require_roles(Role.MANAGER, Role.ADMIN)
require_admin = require_roles(Role.ADMIN)


def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(20, ge=1, description="Items per page"),
) -> PaginationParams:
    """
    Get pagination parameters. Oversized pages are capped rather than rejected.
    """
    return PaginationParams(page=page, page_size=min(page_size, MAX_PAGE_SIZE))
