"""Interview candidate service functions.

Every mutation reads the whole candidate, applies one typed update from
``core.pipeline`` and writes the record back as a single row replace.
"""

from typing import Any, Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import NotFoundError, ValidationError
from core.pipeline import (
    CandidateRecord,
    CandidateStage,
    CandidateUpdate,
    CommunicationAdded,
    DecisionStatus,
    DecisionUpdate,
    FeedbackUpdate,
    InterviewScheduled,
    OfferCreated,
    OfferStatus,
    OfferStatusUpdate,
    RatingUpdate,
    SkillsUpdate,
    StageUpdate,
    apply_update,
    check_rating,
    new_candidate,
    parse_enum,
)
from core.utils.datetime import now
from database.repositories.applications import CareerApplicationRepository
from database.repositories.interview_candidates import InterviewCandidateRepository

logger = logging.getLogger(__name__)


async def _load(repo: InterviewCandidateRepository, candidate_id: int) -> CandidateRecord:
    record = await repo.get_record(candidate_id)
    if record is None:
        raise NotFoundError(f"Interview candidate {candidate_id} not found")
    return record


async def _mutate(
    session: AsyncSession,
    candidate_id: int,
    update: CandidateUpdate,
    actor_id: Optional[int],
) -> CandidateRecord:
    """Load, apply ``update`` and persist."""
    repo = InterviewCandidateRepository(session)
    record = await _load(repo, candidate_id)
    updated = apply_update(
        record,
        update,
        actor_id,
        now(),
        enforce_transitions=settings.enforce_stage_transitions,
    )
    saved = await repo.save(updated)

    if saved.current_stage != record.current_stage:
        logger.info(
            f"Candidate {candidate_id} moved {record.current_stage.value} -> "
            f"{saved.current_stage.value} by user {actor_id}",
            extra={"candidate_id": candidate_id},
        )
    return saved


# ==================== Creation ==================== #

async def create_from_application(
    session: AsyncSession,
    application_id: int,
    actor_id: Optional[int] = None,
) -> CandidateRecord:
    """
    Create the interview candidate for a career application.

    Idempotent: if the application already has a candidate, that candidate
    is returned unchanged. The application's own status is not touched.

    Raises:
        NotFoundError: The application does not exist
    """
    application = await CareerApplicationRepository(session).get_by_id(application_id)
    if application is None:
        raise NotFoundError(f"Career application {application_id} not found")

    repo = InterviewCandidateRepository(session)
    existing = await repo.find_by_career_application(application_id)
    if existing is not None:
        logger.info(
            f"Application {application_id} already has candidate {existing.id}"
        )
        return existing

    record = await repo.insert(new_candidate(application_id, actor_id, now()))
    logger.info(
        f"Created interview candidate {record.id} from application {application_id}",
        extra={"candidate_id": record.id},
    )
    return record


# ==================== Lifecycle operations ==================== #

async def schedule_interview(
    session: AsyncSession,
    candidate_id: int,
    stage: Any,
    scheduled_at: Any,
    interviewers: list[int],
    actor_id: Optional[int] = None,
    duration: Optional[int] = None,
    location: Optional[str] = None,
    meeting_link: Optional[str] = None,
) -> CandidateRecord:
    """Append a scheduled interview. The candidate's stage is unchanged."""
    return await _mutate(
        session,
        candidate_id,
        InterviewScheduled(
            stage=stage,
            scheduled_at=scheduled_at,
            interviewers=list(interviewers or []),
            duration=duration,
            location=location,
            meeting_link=meeting_link,
        ),
        actor_id,
    )


async def update_interview_feedback(
    session: AsyncSession,
    candidate_id: int,
    interview_index: int,
    feedback: Optional[str] = None,
    rating: Any = None,
    actor_id: Optional[int] = None,
) -> CandidateRecord:
    """Record feedback for one interview and mark it completed."""
    return await _mutate(
        session,
        candidate_id,
        FeedbackUpdate(interview_index=interview_index, feedback=feedback, rating=rating),
        actor_id,
    )


async def update_stage(
    session: AsyncSession,
    candidate_id: int,
    new_stage: Any,
    actor_id: Optional[int] = None,
) -> CandidateRecord:
    return await _mutate(session, candidate_id, StageUpdate(stage=new_stage), actor_id)


async def make_decision(
    session: AsyncSession,
    candidate_id: int,
    decision: Any,
    actor_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> CandidateRecord:
    """Overwrite the decision (not merged with the previous one)."""
    return await _mutate(
        session, candidate_id, DecisionUpdate(decision=decision, notes=notes), actor_id
    )


async def add_communication(
    session: AsyncSession,
    candidate_id: int,
    type: Any,
    subject: Optional[str],
    content: Optional[str],
    actor_id: Optional[int] = None,
    status: Any = None,
) -> CandidateRecord:
    """Log a communication. No timeline entry is written for it."""
    return await _mutate(
        session,
        candidate_id,
        CommunicationAdded(type=type, subject=subject, content=content, status=status),
        actor_id,
    )


async def update_overall_rating(
    session: AsyncSession,
    candidate_id: int,
    rating: Any,
    actor_id: Optional[int] = None,
) -> CandidateRecord:
    return await _mutate(session, candidate_id, RatingUpdate(rating=rating), actor_id)


async def update_skills_assessment(
    session: AsyncSession,
    candidate_id: int,
    technical: Any = None,
    communication: Any = None,
    problem_solving: Any = None,
    cultural_fit: Any = None,
    actor_id: Optional[int] = None,
) -> CandidateRecord:
    """Replace the skills assessment. Omitted sub-ratings are cleared."""
    return await _mutate(
        session,
        candidate_id,
        SkillsUpdate(
            technical=technical,
            communication=communication,
            problem_solving=problem_solving,
            cultural_fit=cultural_fit,
        ),
        actor_id,
    )


async def create_offer(
    session: AsyncSession,
    candidate_id: int,
    salary: Any,
    start_date: Any,
    actor_id: Optional[int] = None,
    currency: str = "USD",
    benefits: Optional[list[str]] = None,
) -> CandidateRecord:
    """
    Extend an offer. Requires stage ``final-interview``; moves to ``offer``.

    Raises:
        PreconditionFailedError: Candidate is not in final-interview
        ValidationError: Salary not positive or start date not in the future
    """
    return await _mutate(
        session,
        candidate_id,
        OfferCreated(
            salary=salary,
            start_date=start_date,
            currency=currency,
            benefits=list(benefits or []),
        ),
        actor_id,
    )


async def update_offer_status(
    session: AsyncSession,
    candidate_id: int,
    status: Any,
    actor_id: Optional[int] = None,
) -> CandidateRecord:
    """
    Change the offer status.

    ``accepted`` hires the candidate and approves the decision; ``declined``
    rejects both.
    """
    return await _mutate(session, candidate_id, OfferStatusUpdate(status=status), actor_id)


# ==================== Queries ==================== #

async def get_candidate(session: AsyncSession, candidate_id: int) -> CandidateRecord:
    return await _load(InterviewCandidateRepository(session), candidate_id)


async def list_candidates(
    session: AsyncSession,
    stage: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> tuple[list[CandidateRecord], int]:
    stage_enum = parse_enum(CandidateStage, stage, "stage") if stage else None
    return await InterviewCandidateRepository(session).list_records(
        stage=stage_enum, limit=limit, offset=offset
    )


async def find_by_stage(session: AsyncSession, stage: Any) -> list[CandidateRecord]:
    stage_enum = parse_enum(CandidateStage, stage, "stage")
    return await InterviewCandidateRepository(session).find_by_stage(stage_enum)


async def find_needing_follow_up(session: AsyncSession) -> list[CandidateRecord]:
    """Candidates not updated for 3+ days and not hired or rejected."""
    return await InterviewCandidateRepository(session).find_needing_follow_up(days=3)


async def find_with_upcoming_interviews(session: AsyncSession) -> list[CandidateRecord]:
    """Candidates with a scheduled interview in the next 7 days."""
    return await InterviewCandidateRepository(session).find_with_upcoming_interviews(days=7)


async def find_by_interviewer(
    session: AsyncSession, interviewer_id: int
) -> list[CandidateRecord]:
    return await InterviewCandidateRepository(session).find_by_interviewer(interviewer_id)


async def find_by_decision_status(session: AsyncSession, status: Any) -> list[CandidateRecord]:
    status_enum = parse_enum(DecisionStatus, status, "decision")
    return await InterviewCandidateRepository(session).find_by_decision_status(status_enum)


async def find_by_offer_status(session: AsyncSession, status: Any) -> list[CandidateRecord]:
    status_enum = parse_enum(OfferStatus, status, "offer status")
    return await InterviewCandidateRepository(session).find_by_offer_status(status_enum)


async def find_by_rating_range(
    session: AsyncSession, min_rating: Any, max_rating: Any
) -> list[CandidateRecord]:
    low = check_rating(min_rating, "Minimum rating")
    high = check_rating(max_rating, "Maximum rating")
    if low > high:
        raise ValidationError("Minimum rating cannot exceed maximum rating")
    return await InterviewCandidateRepository(session).find_by_rating_range(low, high)


async def get_statistics(session: AsyncSession) -> dict[str, Any]:
    return await InterviewCandidateRepository(session).get_statistics()
