"""
Interview Candidates Module

One row per candidate in the hiring pipeline. The stage and rating are
plain columns so they can be filtered and aggregated in SQL; interviews,
decision, offer, communications and the timeline are JSON documents whose
shape is defined by the records in ``core.pipeline``.

The row is always written as a whole (see
``InterviewCandidateRepository.save``); there is no version column, so the
last writer wins.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import Enum as SQLEnum, ForeignKey, Integer, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column

from core.pipeline import CandidateRecord, CandidateStage
from core.utils.datetime import now
from database.engine import Base
from database.types import BigIntPK, UTCDateTime


class InterviewCandidate(Base):
    """Persisted state of an interview candidate."""

    __tablename__: str = "interview_candidates"
    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    # One candidate per application is enforced by lookup-before-create
    career_application_id: Mapped[int | None] = mapped_column(
        BigIntPK,
        ForeignKey("career_applications.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    current_stage: Mapped[CandidateStage] = mapped_column(
        SQLEnum(CandidateStage, native_enum=False, length=30),
        nullable=False,
        default=CandidateStage.SCREENING,
        index=True,
    )
    overall_rating: Mapped[int | None] = mapped_column(Integer)

    # Nested documents
    interviews: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    skills_assessment: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    decision: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    offer: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    communications: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    timeline: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )

    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=now, index=True
    )

    def to_record(self) -> CandidateRecord:
        """Load the row into the typed domain record."""
        return CandidateRecord.model_validate({
            "id": self.id,
            "career_application_id": self.career_application_id,
            "current_stage": self.current_stage,
            "interviews": self.interviews or [],
            "overall_rating": self.overall_rating,
            "skills_assessment": self.skills_assessment or {},
            "decision": self.decision or {},
            "offer": self.offer,
            "communications": self.communications or [],
            "timeline": self.timeline or [],
            "notes": self.notes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        })

    def apply_record(self, record: CandidateRecord) -> None:
        """Overwrite every column from ``record``."""
        data = record.model_dump(mode="json")
        self.career_application_id = record.career_application_id
        self.current_stage = record.current_stage
        self.overall_rating = record.overall_rating
        self.interviews = data["interviews"]
        self.skills_assessment = data["skills_assessment"]
        self.decision = data["decision"]
        self.offer = data["offer"]
        self.communications = data["communications"]
        self.timeline = data["timeline"]
        self.notes = record.notes
        self.updated_at = record.updated_at or now()
        if record.created_at is not None:
            self.created_at = record.created_at
