"""
Interview candidate endpoints.

Drives a candidate through screening, interviews, decision and offer.
All routes require an authenticated staff account.
"""

from typing import Iterable, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_pagination_params
from api.schemas.common import PaginatedResponse, PaginationParams
from api.schemas.interview_candidates import (
    CandidateCreate,
    CandidateResponse,
    CandidateStatistics,
    CommunicationRequest,
    DecisionRequest,
    FeedbackRequest,
    InterviewScheduleRequest,
    OfferRequest,
    OfferStatusRequest,
    RatingRequest,
    SkillsAssessmentRequest,
    StageUpdateRequest,
)
from api.services import interview_candidates as candidate_service
from core.middleware.authorization import Permission, require_permission
from core.pipeline import CandidateRecord
from core.security import AuthenticatedUser
from core.utils.datetime import now
from database.engine import get_db

router = APIRouter(prefix="/interview-candidates", tags=["interview-candidates"])

can_read = require_permission(Permission.CANDIDATE_READ)
can_update = require_permission(Permission.CANDIDATE_UPDATE)


def _respond(record: CandidateRecord) -> CandidateResponse:
    return CandidateResponse.from_record(record, now())


def _respond_all(records: Iterable[CandidateRecord]) -> list[CandidateResponse]:
    current = now()
    return [CandidateResponse.from_record(r, current) for r in records]


# ==================== Create & query ==================== #

@router.post(
    "",
    response_model=CandidateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Candidate From Application",
    description="Returns the existing candidate if the application already has one.",
)
async def create_candidate(
    body: CandidateCreate,
    current_user: AuthenticatedUser = Depends(require_permission(Permission.CANDIDATE_CREATE)),
    db: AsyncSession = Depends(get_db),
):
    record = await candidate_service.create_from_application(
        db, body.career_application_id, actor_id=current_user.id
    )
    return _respond(record)


@router.get(
    "",
    response_model=PaginatedResponse[CandidateResponse],
    summary="List Candidates",
    dependencies=[Depends(can_read)],
)
async def list_candidates(
    stage: Optional[str] = Query(None, description="Filter by current stage"),
    pagination: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db),
):
    records, total = await candidate_service.list_candidates(
        db, stage=stage, limit=pagination.page_size, offset=pagination.offset
    )
    return PaginatedResponse.create(_respond_all(records), total, pagination)


@router.get(
    "/statistics",
    response_model=CandidateStatistics,
    summary="Candidate Statistics",
    dependencies=[Depends(can_read)],
)
async def candidate_statistics(db: AsyncSession = Depends(get_db)):
    return await candidate_service.get_statistics(db)


@router.get(
    "/follow-up",
    response_model=list[CandidateResponse],
    summary="Candidates Needing Follow-up",
    description="Active candidates with no update in the last 3 days.",
    dependencies=[Depends(can_read)],
)
async def candidates_needing_follow_up(db: AsyncSession = Depends(get_db)):
    return _respond_all(await candidate_service.find_needing_follow_up(db))


@router.get(
    "/upcoming-interviews",
    response_model=list[CandidateResponse],
    summary="Candidates With Upcoming Interviews",
    description="Scheduled interviews in the next 7 days.",
    dependencies=[Depends(can_read)],
)
async def candidates_with_upcoming_interviews(db: AsyncSession = Depends(get_db)):
    return _respond_all(await candidate_service.find_with_upcoming_interviews(db))


@router.get(
    "/interviewer/{interviewer_id}",
    response_model=list[CandidateResponse],
    summary="Candidates By Interviewer",
    dependencies=[Depends(can_read)],
)
async def candidates_by_interviewer(
    interviewer_id: int = Path(..., description="Interviewer user ID"),
    db: AsyncSession = Depends(get_db),
):
    return _respond_all(await candidate_service.find_by_interviewer(db, interviewer_id))


@router.get(
    "/stage/{stage}",
    response_model=list[CandidateResponse],
    summary="Candidates By Stage",
    dependencies=[Depends(can_read)],
)
async def candidates_by_stage(stage: str, db: AsyncSession = Depends(get_db)):
    return _respond_all(await candidate_service.find_by_stage(db, stage))


@router.get(
    "/decision/{decision}",
    response_model=list[CandidateResponse],
    summary="Candidates By Decision",
    dependencies=[Depends(can_read)],
)
async def candidates_by_decision(decision: str, db: AsyncSession = Depends(get_db)):
    return _respond_all(await candidate_service.find_by_decision_status(db, decision))


@router.get(
    "/offer/{offer_status}",
    response_model=list[CandidateResponse],
    summary="Candidates By Offer Status",
    dependencies=[Depends(can_read)],
)
async def candidates_by_offer_status(offer_status: str, db: AsyncSession = Depends(get_db)):
    return _respond_all(await candidate_service.find_by_offer_status(db, offer_status))


@router.get(
    "/rating-range",
    response_model=list[CandidateResponse],
    summary="Candidates By Rating Range",
    dependencies=[Depends(can_read)],
)
async def candidates_by_rating_range(
    min_rating: int = Query(1, description="Lowest overall rating, 1 to 5"),
    max_rating: int = Query(5, description="Highest overall rating, 1 to 5"),
    db: AsyncSession = Depends(get_db),
):
    return _respond_all(
        await candidate_service.find_by_rating_range(db, min_rating, max_rating)
    )


@router.get(
    "/{candidate_id}",
    response_model=CandidateResponse,
    summary="Get Candidate",
    dependencies=[Depends(can_read)],
)
async def get_candidate(
    candidate_id: int = Path(..., description="Candidate ID"),
    db: AsyncSession = Depends(get_db),
):
    return _respond(await candidate_service.get_candidate(db, candidate_id))


# ==================== Lifecycle ==================== #

@router.post(
    "/{candidate_id}/schedule-interview",
    response_model=CandidateResponse,
    summary="Schedule Interview",
    description="Append an interview. Does not change the candidate's stage.",
)
async def schedule_interview(
    body: InterviewScheduleRequest,
    candidate_id: int = Path(..., description="Candidate ID"),
    current_user: AuthenticatedUser = Depends(require_permission(Permission.INTERVIEW_SCHEDULE)),
    db: AsyncSession = Depends(get_db),
):
    record = await candidate_service.schedule_interview(
        db,
        candidate_id,
        stage=body.stage,
        scheduled_at=body.scheduled_at,
        interviewers=body.interviewers,
        actor_id=current_user.id,
        duration=body.duration,
        location=body.location,
        meeting_link=body.meeting_link,
    )
    return _respond(record)


@router.patch(
    "/{candidate_id}/interviews/{interview_index}/feedback",
    response_model=CandidateResponse,
    summary="Interview Feedback",
    description="Record feedback and rating; marks the interview completed.",
)
async def interview_feedback(
    body: FeedbackRequest,
    candidate_id: int = Path(..., description="Candidate ID"),
    interview_index: int = Path(..., description="Zero-based interview position"),
    current_user: AuthenticatedUser = Depends(require_permission(Permission.INTERVIEW_FEEDBACK)),
    db: AsyncSession = Depends(get_db),
):
    record = await candidate_service.update_interview_feedback(
        db,
        candidate_id,
        interview_index,
        feedback=body.feedback,
        rating=body.rating,
        actor_id=current_user.id,
    )
    return _respond(record)


@router.patch("/{candidate_id}/stage", response_model=CandidateResponse, summary="Update Stage")
async def update_stage(
    body: StageUpdateRequest,
    candidate_id: int = Path(..., description="Candidate ID"),
    current_user: AuthenticatedUser = Depends(can_update),
    db: AsyncSession = Depends(get_db),
):
    record = await candidate_service.update_stage(
        db, candidate_id, body.stage, actor_id=current_user.id
    )
    return _respond(record)


@router.post("/{candidate_id}/decision", response_model=CandidateResponse, summary="Make Decision")
async def make_decision(
    body: DecisionRequest,
    candidate_id: int = Path(..., description="Candidate ID"),
    current_user: AuthenticatedUser = Depends(can_update),
    db: AsyncSession = Depends(get_db),
):
    record = await candidate_service.make_decision(
        db, candidate_id, body.decision, actor_id=current_user.id, notes=body.notes
    )
    return _respond(record)


@router.post(
    "/{candidate_id}/communication",
    response_model=CandidateResponse,
    summary="Log Communication",
)
async def add_communication(
    body: CommunicationRequest,
    candidate_id: int = Path(..., description="Candidate ID"),
    current_user: AuthenticatedUser = Depends(can_update),
    db: AsyncSession = Depends(get_db),
):
    record = await candidate_service.add_communication(
        db,
        candidate_id,
        body.type,
        body.subject,
        body.content,
        actor_id=current_user.id,
        status=body.status,
    )
    return _respond(record)


@router.patch(
    "/{candidate_id}/rating",
    response_model=CandidateResponse,
    summary="Update Overall Rating",
)
async def update_rating(
    body: RatingRequest,
    candidate_id: int = Path(..., description="Candidate ID"),
    current_user: AuthenticatedUser = Depends(can_update),
    db: AsyncSession = Depends(get_db),
):
    record = await candidate_service.update_overall_rating(
        db, candidate_id, body.rating, actor_id=current_user.id
    )
    return _respond(record)


@router.patch(
    "/{candidate_id}/skills-assessment",
    response_model=CandidateResponse,
    summary="Update Skills Assessment",
)
async def update_skills_assessment(
    body: SkillsAssessmentRequest,
    candidate_id: int = Path(..., description="Candidate ID"),
    current_user: AuthenticatedUser = Depends(can_update),
    db: AsyncSession = Depends(get_db),
):
    record = await candidate_service.update_skills_assessment(
        db,
        candidate_id,
        technical=body.technical,
        communication=body.communication,
        problem_solving=body.problem_solving,
        cultural_fit=body.cultural_fit,
        actor_id=current_user.id,
    )
    return _respond(record)


# ==================== Offers ==================== #

@router.post(
    "/{candidate_id}/offer",
    response_model=CandidateResponse,
    summary="Create Offer",
    description="Candidate must be in final-interview; moves them to the offer stage.",
)
async def create_offer(
    body: OfferRequest,
    candidate_id: int = Path(..., description="Candidate ID"),
    current_user: AuthenticatedUser = Depends(require_permission(Permission.OFFER_MANAGE)),
    db: AsyncSession = Depends(get_db),
):
    record = await candidate_service.create_offer(
        db,
        candidate_id,
        body.salary,
        body.start_date,
        actor_id=current_user.id,
        currency=body.currency,
        benefits=body.benefits,
    )
    return _respond(record)


@router.patch(
    "/{candidate_id}/offer-status",
    response_model=CandidateResponse,
    summary="Update Offer Status",
    description="`accepted` hires the candidate, `declined` rejects them.",
)
async def update_offer_status(
    body: OfferStatusRequest,
    candidate_id: int = Path(..., description="Candidate ID"),
    current_user: AuthenticatedUser = Depends(require_permission(Permission.OFFER_MANAGE)),
    db: AsyncSession = Depends(get_db),
):
    record = await candidate_service.update_offer_status(
        db, candidate_id, body.status, actor_id=current_user.id
    )
    return _respond(record)
