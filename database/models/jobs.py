"""
Jobs Module

Job postings. A posting is created as a draft by a staff user, published to
the public listing and eventually closed or archived.
"""

from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import (
    Boolean,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from core.utils.datetime import days_between, now
from database.engine import Base
from database.types import BigIntPK, UTCDateTime


# ==================== Job Enums ===================== #
class JobStatus(str, PyEnum):
    """Job posting status."""

    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"
    ARCHIVED = "archived"


class EmploymentType(str, PyEnum):
    """Job employment type."""

    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    FREELANCE = "freelance"


class ExperienceLevel(str, PyEnum):
    """Seniority, shared by job postings and career applications."""

    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    EXPERT = "expert"


class Job(Base):
    """A job posting."""

    __tablename__: str = "jobs"
    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    requirements: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    responsibilities: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    department: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    employment_type: Mapped[EmploymentType] = mapped_column(
        SQLEnum(EmploymentType, native_enum=False, length=20), nullable=False
    )
    experience_level: Mapped[ExperienceLevel] = mapped_column(
        SQLEnum(ExperienceLevel, native_enum=False, length=20), nullable=False
    )

    # Compensation
    salary_min: Mapped[float | None] = mapped_column(Float)
    salary_max: Mapped[float | None] = mapped_column(Float)
    salary_currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="USD"
    )
    benefits: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    status: Mapped[JobStatus] = mapped_column(
        SQLEnum(JobStatus, native_enum=False, length=20),
        nullable=False,
        default=JobStatus.DRAFT,
        index=True,
    )
    posted_by_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("users.id"), nullable=False, index=True
    )
    application_deadline: Mapped[datetime | None] = mapped_column(UTCDateTime)
    number_of_positions: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_remote: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_urgent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=now, onupdate=now
    )

    __table_args__ = (
        Index("idx_jobs_status_created", "status", "created_at"),
    )

    @property
    def is_active(self) -> bool:
        """Published and still accepting applications."""
        if self.status != JobStatus.PUBLISHED:
            return False
        return self.application_deadline is None or self.application_deadline > now()

    @property
    def days_until_deadline(self) -> int | None:
        if self.application_deadline is None:
            return None
        return days_between(now(), self.application_deadline)
