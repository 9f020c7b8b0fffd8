"""
Authentication endpoints.

Registration, login and the caller's own profile.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.users import (
    ProfileUpdate,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from api.services import users as user_service
from core.middleware.authorization import Permission, require_permission
from core.security import AuthenticatedUser
from database.engine import get_db

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a user account and log in. New accounts get the `user` role.",
)
async def register(body: UserRegister, db: AsyncSession = Depends(get_db)):
    return await user_service.register_user(db, body.name, body.email, body.password)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login",
    description="Exchange email and password for a 24 hour access token.",
)
async def login(body: UserLogin, db: AsyncSession = Depends(get_db)):
    return await user_service.authenticate_user(db, body.email, body.password)


@router.get("/profile", response_model=UserResponse, summary="Get Profile")
async def get_profile(
    current_user: AuthenticatedUser = Depends(require_permission(Permission.PROFILE_MANAGE)),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(db, current_user.id)


@router.put("/profile", response_model=UserResponse, summary="Update Profile")
async def update_profile(
    body: ProfileUpdate,
    current_user: AuthenticatedUser = Depends(require_permission(Permission.PROFILE_MANAGE)),
    db: AsyncSession = Depends(get_db),
):
    """Update name, email or password. Role and activation are admin-only."""
    return await user_service.update_user(
        db, current_user.id, body.model_dump(exclude_unset=True)
    )
