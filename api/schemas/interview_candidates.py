"""
Interview candidate schemas.

Request bodies are deliberately permissive about enum values and dates so
that the lifecycle rules in ``core.pipeline`` decide what is valid and
answer with a 400 ``VALIDATION_ERROR`` rather than a framework 422.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from core.pipeline import CandidateRecord, Interview, candidate_status, next_interview


class CandidateCreate(BaseModel):
    career_application_id: int = Field(..., description="Application to promote")


class InterviewScheduleRequest(BaseModel):
    stage: Optional[str] = Field(None, description="Interview stage")
    scheduled_at: Optional[datetime] = Field(None, description="Must be in the future")
    interviewers: list[int] = Field(default_factory=list, description="Interviewer user ids")
    duration: Optional[int] = Field(None, description="Minutes, defaults to 60")
    location: Optional[str] = Field(None, max_length=200)
    meeting_link: Optional[str] = Field(None, max_length=500)


class FeedbackRequest(BaseModel):
    feedback: Optional[str] = Field(None, max_length=5000)
    rating: Optional[float] = Field(None, description="1 to 5")


class StageUpdateRequest(BaseModel):
    stage: str


class DecisionRequest(BaseModel):
    decision: str = Field(..., description="pending, approved, rejected or on-hold")
    notes: Optional[str] = Field(None, max_length=2000)


class CommunicationRequest(BaseModel):
    type: Optional[str] = Field(None, description="email, phone, in-person or video")
    subject: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = Field(None, max_length=5000)
    status: Optional[str] = Field(None, description="sent, delivered, read or replied")


class RatingRequest(BaseModel):
    rating: Optional[float] = None


class SkillsAssessmentRequest(BaseModel):
    technical: Optional[float] = None
    communication: Optional[float] = None
    problem_solving: Optional[float] = None
    cultural_fit: Optional[float] = None


class OfferRequest(BaseModel):
    salary: Optional[float] = None
    start_date: Optional[datetime] = None
    currency: str = Field("USD", min_length=3, max_length=3)
    benefits: list[str] = Field(default_factory=list)


class OfferStatusRequest(BaseModel):
    status: str = Field(..., description="pending, accepted, declined or expired")


class CandidateResponse(CandidateRecord):
    """Candidate state plus derived views."""

    status: str = Field(description="hired, rejected, offer-pending or the current stage")
    next_interview: Optional[Interview] = None

    @classmethod
    def from_record(cls, record: CandidateRecord, now: datetime) -> "CandidateResponse":
        return cls(
            **record.model_dump(),
            status=candidate_status(record),
            next_interview=next_interview(record, now),
        )


class RatingStats(BaseModel):
    average: Optional[float] = None
    min: Optional[int] = None
    max: Optional[int] = None


class CandidateStatistics(BaseModel):
    total: int
    by_stage: dict[str, int]
    by_decision: dict[str, int]
    by_offer: dict[str, int]
    rating_stats: RatingStats
