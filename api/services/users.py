"""User and authentication service functions."""

from typing import Any, Optional, Sequence
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import AuthenticationFailedError, ConflictError, NotFoundError
from core.security import create_access_token, hash_password, verify_password
from database.models.users import User, UserRole
from database.repositories.users import UserRepository

logger = logging.getLogger(__name__)


def issue_token(user: User) -> dict[str, Any]:
    """Access token payload for a logged-in user."""
    token = create_access_token(user.id, user.email, user.role.value)
    return {
        "user": user,
        "token": token,
        "token_type": "bearer",
        "expires_in": settings.access_token_expire_minutes * 60,
    }


async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password: str,
    role: UserRole = UserRole.USER,
    is_active: bool = True,
) -> User:
    """
    Create an account with a bcrypt-hashed password.

    Raises:
        ConflictError: Email already registered
    """
    repo = UserRepository(session)
    email = email.strip().lower()
    if await repo.email_exists(email):
        raise ConflictError("Email already exists")

    user = await repo.create(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        role=role,
        is_active=is_active,
    )
    logger.info(f"User {user.id} created with role {user.role.value}")
    return user


async def register_user(
    session: AsyncSession, name: str, email: str, password: str
) -> dict[str, Any]:
    """Self-service registration followed by login."""
    await create_user(session, name, email, password, role=UserRole.USER)
    return await authenticate_user(session, email, password)


async def authenticate_user(session: AsyncSession, email: str, password: str) -> dict[str, Any]:
    """
    Check credentials and issue an access token.

    Raises:
        AuthenticationFailedError: Unknown email, wrong password or inactive account
    """
    repo = UserRepository(session)
    user = await repo.find_by_email(email)
    if user is None:
        raise AuthenticationFailedError("Invalid email or password")
    if not user.is_active:
        raise AuthenticationFailedError("Account is deactivated")
    if not verify_password(password, user.password_hash):
        logger.info(f"Failed login for user {user.id}")
        raise AuthenticationFailedError("Invalid email or password")

    await repo.update_last_login(user.id)
    await session.refresh(user)
    logger.info(f"User {user.id} logged in")
    return issue_token(user)


async def get_user(session: AsyncSession, user_id: int) -> User:
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


async def update_user(session: AsyncSession, user_id: int, data: dict[str, Any]) -> User:
    """
    Partially update a user.

    A new email must not belong to another account; a new password is
    re-hashed.
    """
    repo = UserRepository(session)
    values = {key: value for key, value in data.items() if value is not None}

    if "email" in values:
        values["email"] = values["email"].strip().lower()
        if await repo.email_exists(values["email"], exclude_id=user_id):
            raise ConflictError("Email already exists")
    if "password" in values:
        values["password_hash"] = hash_password(values.pop("password"))

    user = await repo.update_by_id(user_id, **values)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


async def list_users(
    session: AsyncSession, limit: Optional[int] = None, offset: int = 0
) -> tuple[Sequence[User], int]:
    repo = UserRepository(session)
    return await repo.list(limit=limit, offset=offset), await repo.count()


async def get_active_users(session: AsyncSession) -> Sequence[User]:
    return await UserRepository(session).find_active()


async def delete_user(session: AsyncSession, user_id: int) -> None:
    deleted = await UserRepository(session).delete(user_id)
    if not deleted:
        raise NotFoundError(f"User {user_id} not found")
    logger.info(f"User {user_id} deleted")
