"""
Job posting endpoints.

Browsing is public. Creating jobs needs an account; changing or deleting a
job is limited to whoever posted it, or an admin.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_pagination_params
from api.schemas.common import MessageResponse, PaginatedResponse, PaginationParams
from api.schemas.jobs import (
    JobCreate,
    JobResponse,
    JobStatistics,
    JobStatusUpdate,
    JobUpdate,
)
from api.services import jobs as job_service
from core.middleware.authorization import Permission, require_permission
from core.security import AuthenticatedUser
from database.engine import get_db

router = APIRouter(prefix="/jobs", tags=["jobs"])


# ==================== Public ==================== #

@router.get(
    "",
    response_model=PaginatedResponse[JobResponse],
    summary="List Active Jobs",
    description="Published jobs whose deadline has not passed, newest first.",
)
async def list_active_jobs(
    pagination: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db),
):
    jobs, total = await job_service.get_active_jobs(
        db, limit=pagination.page_size, offset=pagination.offset
    )
    return PaginatedResponse.create(
        [JobResponse.model_validate(j) for j in jobs], total, pagination
    )


@router.get("/search", response_model=list[JobResponse], summary="Search Jobs")
async def search_jobs(
    q: Optional[str] = Query(None, description="Matches title, description, department and tags"),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.search_jobs(db, q)


@router.get("/filters", response_model=list[JobResponse], summary="Filter Jobs")
async def filter_jobs(
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None, description="Substring match"),
    employment_type: Optional[str] = Query(None),
    experience_level: Optional[str] = Query(None),
    is_remote: Optional[bool] = Query(None),
    salary_min: Optional[float] = Query(None, description="Jobs paying at least this much"),
    salary_max: Optional[float] = Query(None, description="Jobs starting at or below this"),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.get_jobs_by_filters(
        db,
        department=department,
        location=location,
        employment_type=employment_type,
        experience_level=experience_level,
        is_remote=is_remote,
        salary_min=salary_min,
        salary_max=salary_max,
    )


@router.get("/remote", response_model=list[JobResponse], summary="Remote Jobs")
async def remote_jobs(db: AsyncSession = Depends(get_db)):
    return await job_service.get_remote_jobs(db)


@router.get("/urgent", response_model=list[JobResponse], summary="Urgent Jobs")
async def urgent_jobs(db: AsyncSession = Depends(get_db)):
    return await job_service.get_urgent_jobs(db)


@router.get("/expiring", response_model=list[JobResponse], summary="Jobs Expiring Soon")
async def expiring_jobs(
    days: int = Query(7, description="Deadline within this many days"),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.get_jobs_expiring_soon(db, days)


@router.get(
    "/department/{department}",
    response_model=list[JobResponse],
    summary="Jobs By Department",
)
async def jobs_by_department(department: str, db: AsyncSession = Depends(get_db)):
    return await job_service.get_jobs_by_department(db, department)


# ==================== Authenticated ==================== #

@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Job",
)
async def create_job(
    body: JobCreate,
    current_user: AuthenticatedUser = Depends(require_permission(Permission.JOB_CREATE)),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.create_job(db, body.model_dump(), current_user)


@router.get(
    "/statistics",
    response_model=JobStatistics,
    summary="Job Statistics",
    dependencies=[Depends(require_permission(Permission.JOB_ANALYTICS))],
)
async def job_statistics(db: AsyncSession = Depends(get_db)):
    return await job_service.get_job_statistics(db)


@router.get("/my-jobs", response_model=list[JobResponse], summary="My Jobs")
async def my_jobs(
    current_user: AuthenticatedUser = Depends(require_permission(Permission.JOB_CREATE)),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.get_jobs_by_user(db, current_user.id)


@router.get("/{job_id}", response_model=JobResponse, summary="Get Job")
async def get_job(
    job_id: int = Path(..., description="Job ID"),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.get_job(db, job_id)


@router.put("/{job_id}", response_model=JobResponse, summary="Update Job")
async def update_job(
    body: JobUpdate,
    job_id: int = Path(..., description="Job ID"),
    current_user: AuthenticatedUser = Depends(require_permission(Permission.JOB_UPDATE)),
    db: AsyncSession = Depends(get_db),
):
    data = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    return await job_service.update_job(db, job_id, data, current_user)


@router.delete("/{job_id}", response_model=MessageResponse, summary="Delete Job")
async def delete_job(
    job_id: int = Path(..., description="Job ID"),
    current_user: AuthenticatedUser = Depends(require_permission(Permission.JOB_DELETE)),
    db: AsyncSession = Depends(get_db),
):
    await job_service.delete_job(db, job_id, current_user)
    return MessageResponse(message="Job deleted successfully")


@router.post("/{job_id}/publish", response_model=JobResponse, summary="Publish Job")
async def publish_job(
    job_id: int = Path(..., description="Job ID"),
    current_user: AuthenticatedUser = Depends(require_permission(Permission.JOB_PUBLISH)),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.publish_job(db, job_id, current_user)


@router.post("/{job_id}/close", response_model=JobResponse, summary="Close Job")
async def close_job(
    job_id: int = Path(..., description="Job ID"),
    current_user: AuthenticatedUser = Depends(require_permission(Permission.JOB_PUBLISH)),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.close_job(db, job_id, current_user)


@router.patch("/{job_id}/status", response_model=JobResponse, summary="Update Job Status")
async def update_job_status(
    body: JobStatusUpdate,
    job_id: int = Path(..., description="Job ID"),
    current_user: AuthenticatedUser = Depends(require_permission(Permission.JOB_UPDATE)),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.update_job_status(db, job_id, body.status, current_user)
