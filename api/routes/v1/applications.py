"""
Career application endpoints.

Submission is public; review requires a manager or admin, deletion an admin.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_pagination_params, require_admin, require_manager
from api.schemas.applications import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStatistics,
    ApplicationStatusUpdate,
    ApplicationSubmitted,
)
from api.schemas.common import MessageResponse, PaginatedResponse, PaginationParams
from api.services import applications as application_service
from api.services.notifications import NotificationPublisher, get_notification_publisher
from core.security import AuthenticatedUser
from database.engine import get_db

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post(
    "",
    response_model=ApplicationSubmitted,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Application",
    description="Public application form. Sends confirmation emails in the background.",
)
async def submit_application(
    body: ApplicationCreate,
    db: AsyncSession = Depends(get_db),
    publisher: NotificationPublisher = Depends(get_notification_publisher),
):
    application = await application_service.submit_application(
        db, body.model_dump(), publisher=publisher
    )
    return ApplicationSubmitted(
        id=application.id,
        application=ApplicationResponse.model_validate(application),
    )


@router.get(
    "",
    response_model=PaginatedResponse[ApplicationResponse],
    summary="List Applications",
    dependencies=[Depends(require_manager)],
)
async def list_applications(
    status_filter: Optional[str] = Query(None, alias="status"),
    position: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db),
):
    items, total = await application_service.list_applications(
        db,
        status=status_filter,
        position=position,
        limit=pagination.page_size,
        offset=pagination.offset,
    )
    return PaginatedResponse.create(
        [ApplicationResponse.model_validate(a) for a in items], total, pagination
    )


@router.get(
    "/status/{status_value}",
    response_model=list[ApplicationResponse],
    summary="Applications By Status",
    dependencies=[Depends(require_manager)],
)
async def applications_by_status(
    status_value: str = Path(..., description="Application status"),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.get_applications_by_status(db, status_value)


@router.get(
    "/recent",
    response_model=list[ApplicationResponse],
    summary="Recent Applications",
    dependencies=[Depends(require_manager)],
)
async def recent_applications(
    days: int = Query(7, description="Look-back window in days"),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.get_recent_applications(db, days)


@router.get(
    "/statistics",
    response_model=ApplicationStatistics,
    summary="Application Statistics",
    dependencies=[Depends(require_manager)],
)
async def application_statistics(db: AsyncSession = Depends(get_db)):
    return await application_service.get_application_statistics(db)


@router.get(
    "/search",
    response_model=list[ApplicationResponse],
    summary="Search Applications",
    description="Case-insensitive match on name, email and position.",
    dependencies=[Depends(require_manager)],
)
async def search_applications(
    q: Optional[str] = Query(None, description="Search term"),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.search_applications(db, q)


@router.get(
    "/{application_id}",
    response_model=ApplicationResponse,
    summary="Get Application",
    dependencies=[Depends(require_manager)],
)
async def get_application(
    application_id: int = Path(..., description="Application ID"),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.get_application(db, application_id)


@router.put(
    "/{application_id}/status",
    response_model=ApplicationResponse,
    summary="Update Application Status",
)
async def update_application_status(
    body: ApplicationStatusUpdate,
    application_id: int = Path(..., description="Application ID"),
    current_user: AuthenticatedUser = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.update_application_status(
        db, application_id, body.status, notes=body.notes, actor_id=current_user.id
    )


@router.delete(
    "/{application_id}",
    response_model=MessageResponse,
    summary="Delete Application",
    dependencies=[Depends(require_admin)],
)
async def delete_application(
    application_id: int = Path(..., description="Application ID"),
    db: AsyncSession = Depends(get_db),
):
    await application_service.delete_application(db, application_id)
    return MessageResponse(message="Application deleted successfully")
