"""
Career Applications Module

Applications submitted through the public careers form. Staff move them
through a coarse review status; the detailed hiring pipeline lives on the
interview candidate created from the application.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Enum as SQLEnum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from core.utils.datetime import days_between, now
from database.engine import Base
from database.models.jobs import ExperienceLevel
from database.types import BigIntPK, UTCDateTime


class ApplicationStatus(str, PyEnum):
    """Review status of a career application."""

    PENDING = "pending"
    REVIEWED = "reviewed"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    HIRED = "hired"


class CareerApplication(Base):
    """A public career application."""

    __tablename__: str = "career_applications"
    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )

    # Applicant
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    position: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    experience: Mapped[ExperienceLevel] = mapped_column(
        SQLEnum(ExperienceLevel, native_enum=False, length=20), nullable=False
    )

    # Resume attachment metadata (the file itself lives in external storage)
    resume_filename: Mapped[str | None] = mapped_column(String(255))
    resume_path: Mapped[str | None] = mapped_column(String(500))
    resume_mimetype: Mapped[str | None] = mapped_column(String(100))
    resume_size: Mapped[int | None] = mapped_column(Integer)

    cover_letter: Mapped[str | None] = mapped_column(Text)
    status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(ApplicationStatus, native_enum=False, length=20),
        nullable=False,
        default=ApplicationStatus.PENDING,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text)

    applied_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=now
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=now, onupdate=now
    )

    __table_args__ = (
        Index("idx_career_applications_status_applied", "status", "applied_at"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def days_since_applied(self) -> int:
        return days_between(self.applied_at, now())
