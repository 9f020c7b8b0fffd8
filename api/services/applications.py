"""Career application service functions."""

from typing import Any, Optional, Sequence
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.services import interview_candidates
from api.services.notifications import ApplicationSubmitted, NotificationPublisher
from core.config import settings
from core.exceptions import NotFoundError, ServiceError, ValidationError
from core.pipeline import parse_enum
from database.models.applications import ApplicationStatus, CareerApplication
from database.repositories.applications import CareerApplicationRepository

logger = logging.getLogger(__name__)


async def submit_application(
    session: AsyncSession,
    data: dict[str, Any],
    publisher: Optional[NotificationPublisher] = None,
    auto_create_candidate: Optional[bool] = None,
) -> CareerApplication:
    """
    Store a public career application.

    After the insert commits, the applicant confirmation and HR notification
    are published and, when enabled, the interview candidate is created.
    Neither side effect can fail the submission.
    """
    application = await CareerApplicationRepository(session).create(**data)
    logger.info(
        f"Career application {application.id} received for {application.position}"
    )

    if publisher is not None:
        try:
            publisher.publish(ApplicationSubmitted.from_application(application))
        except Exception:
            logger.exception(
                f"Notification publishing failed for application {application.id}"
            )

    if auto_create_candidate is None:
        auto_create_candidate = settings.auto_create_candidates
    if auto_create_candidate:
        try:
            await interview_candidates.create_from_application(session, application.id)
        except (ServiceError, SQLAlchemyError):
            await session.rollback()
            await session.refresh(application)
            logger.exception(
                f"Could not create interview candidate for application {application.id}"
            )

    return application


async def get_application(session: AsyncSession, application_id: int) -> CareerApplication:
    application = await CareerApplicationRepository(session).get_by_id(application_id)
    if application is None:
        raise NotFoundError(f"Career application {application_id} not found")
    return application


async def list_applications(
    session: AsyncSession,
    status: Optional[str] = None,
    position: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> tuple[Sequence[CareerApplication], int]:
    status_enum = parse_enum(ApplicationStatus, status, "status") if status else None
    return await CareerApplicationRepository(session).find_filtered(
        status=status_enum, position=position, limit=limit, offset=offset
    )


async def update_application_status(
    session: AsyncSession,
    application_id: int,
    status: Any,
    notes: Optional[str] = None,
    actor_id: Optional[int] = None,
) -> CareerApplication:
    """Set the review status; ``notes`` replaces the existing notes when given."""
    status_enum = parse_enum(ApplicationStatus, status, "status")
    values: dict[str, Any] = {"status": status_enum}
    if notes is not None:
        values["notes"] = notes

    application = await CareerApplicationRepository(session).update_by_id(
        application_id, **values
    )
    if application is None:
        raise NotFoundError(f"Career application {application_id} not found")

    logger.info(
        f"Application {application_id} marked {status_enum.value} by user {actor_id}"
    )
    return application


async def get_applications_by_status(
    session: AsyncSession, status: Any
) -> Sequence[CareerApplication]:
    status_enum = parse_enum(ApplicationStatus, status, "status")
    return await CareerApplicationRepository(session).find_by_status(status_enum)


async def get_recent_applications(
    session: AsyncSession, days: int = 7
) -> Sequence[CareerApplication]:
    if days < 1:
        raise ValidationError("Days must be at least 1")
    return await CareerApplicationRepository(session).find_recent(days)


async def get_applications_by_position(
    session: AsyncSession, position: str
) -> Sequence[CareerApplication]:
    return await CareerApplicationRepository(session).find_by_position(position)


async def search_applications(
    session: AsyncSession, term: Optional[str]
) -> Sequence[CareerApplication]:
    if not term or not term.strip():
        raise ValidationError("Search term is required")
    return await CareerApplicationRepository(session).search(term.strip())


async def get_application_statistics(session: AsyncSession) -> dict[str, Any]:
    return await CareerApplicationRepository(session).get_statistics()


async def delete_application(session: AsyncSession, application_id: int) -> None:
    deleted = await CareerApplicationRepository(session).delete(application_id)
    if not deleted:
        raise NotFoundError(f"Career application {application_id} not found")
    logger.info(f"Career application {application_id} deleted")
