"""Job posting schemas.

Request models only check types and lengths; the business rules (salary
range, future deadline, non-empty lists) are enforced in the job service.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from api.schemas.common import TimestampMixin
from database.models.jobs import EmploymentType, ExperienceLevel, JobStatus


def _strip_items(v):
    if isinstance(v, list):
        return [item.strip() for item in v if isinstance(item, str) and item.strip()]
    return v


class JobBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100, description="Job title")
    description: str = Field(..., min_length=1, max_length=5000)
    requirements: list[str] = Field(default_factory=list)
    responsibilities: list[str] = Field(default_factory=list)
    department: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=200)
    employment_type: EmploymentType
    experience_level: ExperienceLevel
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    salary_currency: str = Field("USD", min_length=3, max_length=3)
    benefits: list[str] = Field(default_factory=list)
    application_deadline: Optional[datetime] = None
    number_of_positions: int = Field(1, ge=1)
    tags: list[str] = Field(default_factory=list)
    is_remote: bool = False
    is_urgent: bool = False

    @field_validator("requirements", "responsibilities", "benefits", "tags", mode="before")
    @classmethod
    def strip_list_items(cls, v):
        """Drop blank entries."""
        return _strip_items(v)


class JobCreate(JobBase):
    status: JobStatus = JobStatus.DRAFT


class JobUpdate(BaseModel):
    """Partial update. Omitted fields are left unchanged."""

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    requirements: Optional[list[str]] = None
    responsibilities: Optional[list[str]] = None
    department: Optional[str] = Field(None, min_length=1, max_length=100)
    location: Optional[str] = Field(None, min_length=1, max_length=200)
    employment_type: Optional[EmploymentType] = None
    experience_level: Optional[ExperienceLevel] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    salary_currency: Optional[str] = Field(None, min_length=3, max_length=3)
    benefits: Optional[list[str]] = None
    application_deadline: Optional[datetime] = None
    number_of_positions: Optional[int] = Field(None, ge=1)
    tags: Optional[list[str]] = None
    is_remote: Optional[bool] = None
    is_urgent: Optional[bool] = None

    @field_validator("requirements", "responsibilities", "benefits", "tags", mode="before")
    @classmethod
    def strip_list_items(cls, v):
        return _strip_items(v)


class JobStatusUpdate(BaseModel):
    status: str = Field(..., description="draft, published, closed or archived")


class JobResponse(JobBase, TimestampMixin):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: JobStatus
    posted_by_id: int
    is_active: bool = Field(description="Published and before the deadline")
    days_until_deadline: Optional[int] = None


class JobStatistics(BaseModel):
    total: int
    active: int
    by_status: dict[str, int]
    by_department: dict[str, int]
    remote: int
    on_site: int
