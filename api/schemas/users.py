"""User and authentication schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from api.schemas.common import TimestampMixin
from database.models.users import UserRole


class _NormalizedEmail(BaseModel):
    @field_validator("email", mode="before", check_fields=False)
    @classmethod
    def normalize_email(cls, v):
        """Emails are stored lower-cased."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class UserRegister(_NormalizedEmail):
    """Self-service registration. Always creates a ``user`` account."""

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class UserLogin(_NormalizedEmail):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserCreate(UserRegister):
    """Admin-created account with an explicit role."""

    role: UserRole = UserRole.USER
    is_active: bool = True


class ProfileUpdate(_NormalizedEmail):
    """Fields a user may change on their own account."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)


class UserUpdate(ProfileUpdate):
    """Admin update; may also change role and activation."""

    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserResponse(TimestampMixin):
    """User as returned by the API. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    is_active: bool
    last_login_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    """Login result."""

    user: UserResponse
    token: str = Field(description="JWT access token")
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
