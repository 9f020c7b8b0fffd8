"""Career application schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from api.schemas.common import TimestampMixin
from database.models.applications import ApplicationStatus
from database.models.jobs import ExperienceLevel


class ApplicationBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=30)
    position: str = Field(..., min_length=1, max_length=200, description="Position applied for")
    experience: ExperienceLevel
    cover_letter: Optional[str] = Field(None, max_length=2000)

    # Resume attachment metadata; the file is uploaded to storage separately
    resume_filename: Optional[str] = Field(None, max_length=255)
    resume_path: Optional[str] = Field(None, max_length=500)
    resume_mimetype: Optional[str] = Field(None, max_length=100)
    resume_size: Optional[int] = Field(None, ge=0)


class ApplicationCreate(ApplicationBase):
    """Public application form."""

    @field_validator("first_name", "last_name", "phone", "position", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class ApplicationStatusUpdate(BaseModel):
    status: str = Field(..., description="pending, reviewed, shortlisted, rejected or hired")
    notes: Optional[str] = Field(None, max_length=2000)


class ApplicationResponse(ApplicationBase, TimestampMixin):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: ApplicationStatus
    notes: Optional[str] = None
    applied_at: datetime
    full_name: str
    days_since_applied: int


class ApplicationSubmitted(BaseModel):
    """Response to a public submission."""

    id: int
    message: str = "Application submitted successfully"
    application: ApplicationResponse


class ApplicationStatistics(BaseModel):
    total: int
    recent: int = Field(description="Applications received in the last 7 days")
    by_status: dict[str, int]
