"""
Interview candidate lifecycle.

Pure domain layer for the hiring pipeline: the stage state variable, the
nested records kept on a candidate (interviews, decision, offer,
communications, timeline) and the typed updates that mutate them.

Every mutation goes through ``apply_update``, which validates the update,
returns a modified copy of the record and appends the matching timeline
entry. Persistence is left to the caller, which writes the returned record
back as a single row replace.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum as PyEnum
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, Field

from core.exceptions import NotFoundError, PreconditionFailedError, ValidationError
from core.utils.datetime import ensure_utc, is_future

logger = logging.getLogger(__name__)

OFFER_VALIDITY = timedelta(days=7)
RATING_MIN = 1
RATING_MAX = 5


# ==================== Enums ==================== #

class CandidateStage(str, PyEnum):
    """Position of a candidate in the hiring pipeline."""
    SCREENING = "screening"
    PHONE_INTERVIEW = "phone-interview"
    TECHNICAL_INTERVIEW = "technical-interview"
    FINAL_INTERVIEW = "final-interview"
    OFFER = "offer"
    REJECTED = "rejected"
    HIRED = "hired"


INTERVIEW_STAGES = frozenset({
    CandidateStage.SCREENING,
    CandidateStage.PHONE_INTERVIEW,
    CandidateStage.TECHNICAL_INTERVIEW,
    CandidateStage.FINAL_INTERVIEW,
})

TERMINAL_STAGES = frozenset({CandidateStage.REJECTED, CandidateStage.HIRED})

# Used only when stage transitions are enforced. Moving to the same stage
# is always allowed.
STAGE_TRANSITIONS: dict[CandidateStage, frozenset[CandidateStage]] = {
    CandidateStage.SCREENING: frozenset({
        CandidateStage.PHONE_INTERVIEW, CandidateStage.REJECTED,
    }),
    CandidateStage.PHONE_INTERVIEW: frozenset({
        CandidateStage.TECHNICAL_INTERVIEW, CandidateStage.REJECTED,
    }),
    CandidateStage.TECHNICAL_INTERVIEW: frozenset({
        CandidateStage.FINAL_INTERVIEW, CandidateStage.REJECTED,
    }),
    CandidateStage.FINAL_INTERVIEW: frozenset({
        CandidateStage.OFFER, CandidateStage.REJECTED,
    }),
    CandidateStage.OFFER: frozenset({
        CandidateStage.HIRED, CandidateStage.REJECTED,
    }),
    CandidateStage.REJECTED: frozenset(),
    CandidateStage.HIRED: frozenset(),
}


class InterviewStatus(str, PyEnum):
    """Per-interview sub-status, independent of the candidate stage."""
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class DecisionStatus(str, PyEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ON_HOLD = "on-hold"


class OfferStatus(str, PyEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class CommunicationType(str, PyEnum):
    EMAIL = "email"
    PHONE = "phone"
    IN_PERSON = "in-person"
    VIDEO = "video"


class CommunicationStatus(str, PyEnum):
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    REPLIED = "replied"


# ==================== Records ==================== #

class Interview(BaseModel):
    """A scheduled interview."""
    stage: CandidateStage
    scheduled_at: datetime
    duration: int = 60
    interviewers: list[int] = Field(default_factory=list)
    location: str = "TBD"
    meeting_link: Optional[str] = None
    status: InterviewStatus = InterviewStatus.SCHEDULED
    feedback: Optional[str] = None
    rating: Optional[int] = None


class SkillsAssessment(BaseModel):
    technical: Optional[int] = None
    communication: Optional[int] = None
    problem_solving: Optional[int] = None
    cultural_fit: Optional[int] = None


class Decision(BaseModel):
    status: DecisionStatus = DecisionStatus.PENDING
    made_by: Optional[int] = None
    made_at: Optional[datetime] = None
    notes: Optional[str] = None


class Offer(BaseModel):
    salary: float
    currency: str = "USD"
    start_date: datetime
    benefits: list[str] = Field(default_factory=list)
    status: OfferStatus = OfferStatus.PENDING
    valid_until: datetime


class Communication(BaseModel):
    type: CommunicationType
    date: datetime
    subject: str
    content: str
    initiated_by: Optional[int] = None
    status: CommunicationStatus = CommunicationStatus.SENT


class TimelineEntry(BaseModel):
    action: str
    date: datetime
    performed_by: Optional[int] = None
    details: Optional[str] = None


class CandidateRecord(BaseModel):
    """Full state of one interview candidate."""
    id: Optional[int] = None
    career_application_id: Optional[int] = None
    current_stage: CandidateStage = CandidateStage.SCREENING
    interviews: list[Interview] = Field(default_factory=list)
    overall_rating: Optional[int] = None
    skills_assessment: SkillsAssessment = Field(default_factory=SkillsAssessment)
    decision: Decision = Field(default_factory=Decision)
    offer: Optional[Offer] = None
    communications: list[Communication] = Field(default_factory=list)
    timeline: list[TimelineEntry] = Field(default_factory=list)
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ==================== Typed updates ==================== #
# Field values arrive unvalidated from the caller; apply_update checks them.

@dataclass(frozen=True)
class StageUpdate:
    stage: Any


@dataclass(frozen=True)
class InterviewScheduled:
    stage: Any
    scheduled_at: Optional[datetime]
    interviewers: list[int] = field(default_factory=list)
    duration: Optional[int] = None
    location: Optional[str] = None
    meeting_link: Optional[str] = None


@dataclass(frozen=True)
class FeedbackUpdate:
    interview_index: int
    feedback: Optional[str] = None
    rating: Optional[Any] = None


@dataclass(frozen=True)
class DecisionUpdate:
    decision: Any
    notes: Optional[str] = None


@dataclass(frozen=True)
class CommunicationAdded:
    type: Any
    subject: Optional[str]
    content: Optional[str]
    status: Optional[Any] = None


@dataclass(frozen=True)
class RatingUpdate:
    rating: Any


@dataclass(frozen=True)
class SkillsUpdate:
    technical: Optional[Any] = None
    communication: Optional[Any] = None
    problem_solving: Optional[Any] = None
    cultural_fit: Optional[Any] = None


@dataclass(frozen=True)
class OfferCreated:
    salary: Optional[Any]
    start_date: Optional[datetime]
    currency: str = "USD"
    benefits: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class OfferStatusUpdate:
    status: Any


CandidateUpdate = Union[
    StageUpdate,
    InterviewScheduled,
    FeedbackUpdate,
    DecisionUpdate,
    CommunicationAdded,
    RatingUpdate,
    SkillsUpdate,
    OfferCreated,
    OfferStatusUpdate,
]


# ==================== Validation helpers ==================== #

def parse_enum(enum_cls: type[PyEnum], value: Any, label: str) -> Any:
    """Coerce a raw value into ``enum_cls`` or raise ValidationError."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Invalid {label}: {value}. Must be one of: {allowed}"
        ) from None


def check_rating(value: Any, label: str = "Rating") -> int:
    """Ratings are integers in [1, 5]."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{label} must be a number between 1 and 5")
    if not math.isfinite(value):
        raise ValidationError(f"{label} must be a number between 1 and 5")
    if value < RATING_MIN or value > RATING_MAX:
        raise ValidationError(f"{label} must be between 1 and 5")
    if int(value) != value:
        raise ValidationError(f"{label} must be a whole number")
    return int(value)


def _require_text(value: Optional[str], label: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{label} is required")
    return str(value).strip()


def check_transition(current: CandidateStage, target: CandidateStage) -> None:
    """Raise ValidationError when ``current -> target`` is not in the table."""
    if current == target:
        return
    if target not in STAGE_TRANSITIONS[current]:
        raise ValidationError(
            f"Cannot move candidate from {current.value} to {target.value}",
            details={"current_stage": current.value, "target_stage": target.value},
        )


# ==================== Lifecycle ==================== #

def _log(record: CandidateRecord, action: str, actor_id: Optional[int],
         now: datetime, details: Optional[str] = None) -> None:
    record.timeline.append(
        TimelineEntry(action=action, date=now, performed_by=actor_id, details=details)
    )


def new_candidate(
    career_application_id: int,
    actor_id: Optional[int],
    now: datetime,
) -> CandidateRecord:
    """Build a fresh candidate at ``screening`` with its creation entry."""
    record = CandidateRecord(
        career_application_id=career_application_id,
        current_stage=CandidateStage.SCREENING,
        created_at=now,
        updated_at=now,
    )
    _log(
        record,
        "Candidate created from application",
        actor_id,
        now,
        "Automatically moved to interview process",
    )
    return record


def _apply_stage(record, update: StageUpdate, actor_id, now, enforce_transitions):
    stage = parse_enum(CandidateStage, update.stage, "stage")
    if enforce_transitions:
        check_transition(record.current_stage, stage)
    record.current_stage = stage
    _log(record, f"Stage updated to {stage.value}", actor_id, now)


def _apply_schedule(record, update: InterviewScheduled, actor_id, now, enforce_transitions):
    if update.stage is None or update.scheduled_at is None or not update.interviewers:
        raise ValidationError("Stage, scheduled time, and interviewers are required")

    stage = parse_enum(CandidateStage, update.stage, "interview stage")
    if stage not in INTERVIEW_STAGES:
        raise ValidationError(
            f"Invalid interview stage: {stage.value}. Must be one of: "
            + ", ".join(s.value for s in CandidateStage if s in INTERVIEW_STAGES)
        )

    scheduled_at = ensure_utc(update.scheduled_at)
    if not is_future(scheduled_at, reference=now):
        raise ValidationError("Interview must be scheduled for a future date")

    interview = Interview(
        stage=stage,
        scheduled_at=scheduled_at,
        interviewers=list(dict.fromkeys(update.interviewers)),
        status=InterviewStatus.SCHEDULED,
    )
    if update.duration is not None:
        if update.duration <= 0:
            raise ValidationError("Interview duration must be positive")
        interview.duration = update.duration
    if update.location:
        interview.location = update.location
    if update.meeting_link:
        interview.meeting_link = update.meeting_link

    record.interviews.append(interview)
    _log(
        record,
        f"Interview scheduled for {stage.value}",
        actor_id,
        now,
        f"Scheduled for {scheduled_at.isoformat()}",
    )


def _apply_feedback(record, update: FeedbackUpdate, actor_id, now, enforce_transitions):
    index = update.interview_index
    if index < 0 or index >= len(record.interviews):
        raise NotFoundError(f"Interview {index} not found")

    rating = None
    if update.rating is not None:
        rating = check_rating(update.rating)

    interview = record.interviews[index]
    if update.feedback is not None:
        interview.feedback = update.feedback
    if rating is not None:
        interview.rating = rating
    interview.status = InterviewStatus.COMPLETED


def _apply_decision(record, update: DecisionUpdate, actor_id, now, enforce_transitions):
    status = parse_enum(DecisionStatus, update.decision, "decision")
    record.decision = Decision(
        status=status,
        made_by=actor_id,
        made_at=now,
        notes=update.notes,
    )
    _log(record, f"Decision made: {status.value}", actor_id, now, update.notes)


def _apply_communication(record, update: CommunicationAdded, actor_id, now, enforce_transitions):
    if update.type is None or not update.subject or not update.content:
        raise ValidationError("Type, subject, and content are required")

    comm_type = parse_enum(CommunicationType, update.type, "communication type")
    status = CommunicationStatus.SENT
    if update.status is not None:
        status = parse_enum(CommunicationStatus, update.status, "communication status")

    record.communications.append(
        Communication(
            type=comm_type,
            date=now,
            subject=update.subject,
            content=update.content,
            initiated_by=actor_id,
            status=status,
        )
    )


def _apply_rating(record, update: RatingUpdate, actor_id, now, enforce_transitions):
    if update.rating is None:
        raise ValidationError("Rating is required")
    rating = check_rating(update.rating)
    record.overall_rating = rating
    _log(record, f"Overall rating updated to {rating}", actor_id, now)


def _apply_skills(record, update: SkillsUpdate, actor_id, now, enforce_transitions):
    values = {}
    for name, label in (
        ("technical", "Technical rating"),
        ("communication", "Communication rating"),
        ("problem_solving", "Problem solving rating"),
        ("cultural_fit", "Cultural fit rating"),
    ):
        raw = getattr(update, name)
        values[name] = check_rating(raw, label) if raw is not None else None

    record.skills_assessment = SkillsAssessment(**values)
    _log(record, "Skills assessment updated", actor_id, now)


def _apply_offer(record, update: OfferCreated, actor_id, now, enforce_transitions):
    # Stage check comes first so a wrong stage fails whatever the payload.
    if record.current_stage != CandidateStage.FINAL_INTERVIEW:
        raise PreconditionFailedError(
            "Candidate must be in final interview stage to create an offer",
            details={"current_stage": record.current_stage.value},
        )

    if update.salary is None or update.start_date is None:
        raise ValidationError("Salary and start date are required")
    if isinstance(update.salary, bool) or not isinstance(update.salary, (int, float)):
        raise ValidationError("Salary must be a number")
    if not math.isfinite(update.salary):
        raise ValidationError("Salary must be a finite number")
    if update.salary <= 0:
        raise ValidationError("Salary must be greater than 0")

    start_date = ensure_utc(update.start_date)
    if not is_future(start_date, reference=now):
        raise ValidationError("Start date must be in the future")

    currency = update.currency or "USD"
    record.offer = Offer(
        salary=update.salary,
        currency=currency,
        start_date=start_date,
        benefits=list(update.benefits or []),
        status=OfferStatus.PENDING,
        valid_until=now + OFFER_VALIDITY,
    )
    record.current_stage = CandidateStage.OFFER
    _log(
        record,
        "Offer created",
        actor_id,
        now,
        f"Offer amount: {update.salary} {currency}",
    )


def _apply_offer_status(record, update: OfferStatusUpdate, actor_id, now, enforce_transitions):
    status = parse_enum(OfferStatus, update.status, "offer status")
    if record.offer is None:
        raise PreconditionFailedError("Candidate has no offer to update")

    record.offer.status = status
    if status == OfferStatus.ACCEPTED:
        record.current_stage = CandidateStage.HIRED
        record.decision.status = DecisionStatus.APPROVED
        record.decision.made_by = actor_id
        record.decision.made_at = now
    elif status == OfferStatus.DECLINED:
        record.current_stage = CandidateStage.REJECTED
        record.decision.status = DecisionStatus.REJECTED
        record.decision.made_by = actor_id
        record.decision.made_at = now

    _log(record, f"Offer {status.value}", actor_id, now)


_HANDLERS: dict[type, Callable[..., None]] = {
    StageUpdate: _apply_stage,
    InterviewScheduled: _apply_schedule,
    FeedbackUpdate: _apply_feedback,
    DecisionUpdate: _apply_decision,
    CommunicationAdded: _apply_communication,
    RatingUpdate: _apply_rating,
    SkillsUpdate: _apply_skills,
    OfferCreated: _apply_offer,
    OfferStatusUpdate: _apply_offer_status,
}


def apply_update(
    record: CandidateRecord,
    update: CandidateUpdate,
    actor_id: Optional[int],
    now: datetime,
    enforce_transitions: bool = False,
) -> CandidateRecord:
    """
    Apply a typed update to a candidate.

    The input record is left untouched; a modified deep copy is returned so
    a failed validation never leaves a half-applied record behind.

    Args:
        record: Current candidate state
        update: One of the typed updates
        actor_id: User performing the action (recorded on the timeline)
        now: Current time, used for timestamps and future-date checks
        enforce_transitions: Reject stage changes outside STAGE_TRANSITIONS

    Returns:
        Updated candidate record

    Raises:
        ValidationError: Invalid enum value, rating, date or missing field
        NotFoundError: Interview index out of range
        PreconditionFailedError: Offer action in the wrong state
    """
    handler = _HANDLERS.get(type(update))
    if handler is None:
        raise TypeError(f"Unsupported candidate update: {type(update).__name__}")

    updated = record.model_copy(deep=True)
    handler(updated, update, actor_id, now, enforce_transitions)
    updated.updated_at = now

    logger.debug(
        "Applied %s to candidate %s (stage=%s)",
        type(update).__name__,
        record.id,
        updated.current_stage.value,
    )
    return updated


# ==================== Derived views ==================== #

def candidate_status(record: CandidateRecord) -> str:
    """Summary status shown in listings."""
    if (
        record.decision.status == DecisionStatus.APPROVED
        and record.offer is not None
        and record.offer.status == OfferStatus.ACCEPTED
    ):
        return "hired"
    if record.decision.status == DecisionStatus.REJECTED:
        return "rejected"
    if record.current_stage == CandidateStage.OFFER:
        return "offer-pending"
    return record.current_stage.value


def next_interview(record: CandidateRecord, now: datetime) -> Optional[Interview]:
    """Earliest scheduled interview that has not happened yet."""
    upcoming = [
        interview
        for interview in record.interviews
        if interview.status == InterviewStatus.SCHEDULED
        and is_future(interview.scheduled_at, reference=now)
    ]
    if not upcoming:
        return None
    return min(upcoming, key=lambda interview: ensure_utc(interview.scheduled_at))
