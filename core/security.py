"""
Security utilities: password hashing and JWT access tokens.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
import jwt

from core.config import settings

logger = logging.getLogger(__name__)

JWTPayload = dict[str, Any]


@dataclass(frozen=True)
class AuthenticatedUser:
    """Claims of a verified access token, attached to the request state."""

    id: int
    email: str
    role: str

    @classmethod
    def from_payload(cls, payload: JWTPayload) -> "AuthenticatedUser":
        return cls(
            id=int(payload["user_id"]),
            email=payload.get("email", ""),
            role=payload.get("role", "user"),
        )


# ==================== Passwords ==================== #

def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """
    Hash a password with bcrypt.

    Args:
        password: Plain text password
        rounds: bcrypt cost factor (defaults to settings.bcrypt_rounds)

    Returns:
        bcrypt hash as a string
    """
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a plain text password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Malformed password hash encountered")
        return False


# ==================== JWT ==================== #

def create_access_token(
    user_id: int,
    email: str,
    role: str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token.

    Args:
        user_id: User ID
        email: User email
        role: User role (user, manager, admin)
        secret_key: Signing key (defaults to settings)
        algorithm: Signing algorithm (defaults to settings)
        expires_delta: Token lifetime (defaults to settings)

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    payload = {
        "user_id": user_id,
        "email": email,
        "role": role,
        "type": "access",
        "iat": now,
        "exp": now + expires_delta,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(
        payload,
        secret_key or settings.jwt_secret_key,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def verify_jwt_token(
    token: str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
    expected_type: str = "access",
) -> JWTPayload:
    """
    Decode and validate a JWT.

    Raises:
        jwt.ExpiredSignatureError: Token has expired
        jwt.InvalidTokenError: Token is malformed, badly signed or of the wrong type
    """
    payload = jwt.decode(
        token,
        secret_key or settings.jwt_secret_key,
        algorithms=[algorithm or settings.jwt_algorithm],
    )
    if payload.get("type") != expected_type:
        raise jwt.InvalidTokenError(f"Expected {expected_type} token")
    if "user_id" not in payload:
        raise jwt.InvalidTokenError("Token missing user_id")
    return payload
