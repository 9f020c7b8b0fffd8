"""Job posting service functions.

Mutations are restricted to the user who posted the job, or an admin.
"""

from datetime import datetime
from typing import Any, Optional, Sequence
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ForbiddenError, NotFoundError, ValidationError
from core.pipeline import parse_enum
from core.security import AuthenticatedUser
from core.utils.datetime import is_future
from database.models.jobs import EmploymentType, ExperienceLevel, Job, JobStatus
from database.models.users import UserRole
from database.repositories.jobs import JobRepository

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "title",
    "description",
    "requirements",
    "responsibilities",
    "department",
    "location",
    "employment_type",
    "experience_level",
    "salary_min",
    "salary_max",
    "application_deadline",
)


def _validate_salary(salary_min: Optional[float], salary_max: Optional[float]) -> None:
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise ValidationError("Minimum salary cannot be greater than maximum salary")


def _validate_deadline(deadline: Optional[datetime]) -> None:
    if deadline is not None and not is_future(deadline):
        raise ValidationError("Application deadline must be in the future")


def validate_job_data(data: dict[str, Any]) -> None:
    """Checks applied to a new job posting."""
    for field in REQUIRED_FIELDS:
        value = data.get(field)
        if value is None or value == "":
            raise ValidationError(f"{field} is required")

    _validate_salary(data["salary_min"], data["salary_max"])
    _validate_deadline(data["application_deadline"])

    if not data["requirements"]:
        raise ValidationError("At least one requirement is required")
    if not data["responsibilities"]:
        raise ValidationError("At least one responsibility is required")


def validate_job_update(job: Job, data: dict[str, Any]) -> None:
    """Checks applied to a partial update, against the merged values."""
    _validate_salary(
        data.get("salary_min", job.salary_min),
        data.get("salary_max", job.salary_max),
    )
    if "application_deadline" in data:
        _validate_deadline(data["application_deadline"])
    for field in ("requirements", "responsibilities"):
        if field in data and not data[field]:
            raise ValidationError(f"At least one {field[:-1]} is required")


def _ensure_can_modify(job: Job, actor: AuthenticatedUser, action: str) -> None:
    if job.posted_by_id != actor.id and actor.role != UserRole.ADMIN.value:
        logger.warning(f"User {actor.id} denied {action} on job {job.id}")
        raise ForbiddenError(f"Unauthorized to {action} this job")


async def _get_for_update(
    repo: JobRepository, job_id: int, actor: AuthenticatedUser, action: str
) -> Job:
    job = await repo.get_by_id(job_id)
    if job is None:
        raise NotFoundError(f"Job {job_id} not found")
    _ensure_can_modify(job, actor, action)
    return job


# ==================== Mutations ==================== #

async def create_job(
    session: AsyncSession, data: dict[str, Any], actor: AuthenticatedUser
) -> Job:
    validate_job_data(data)
    job = await JobRepository(session).create(**data, posted_by_id=actor.id)
    logger.info(f"Job {job.id} '{job.title}' created by user {actor.id}")
    return job


async def update_job(
    session: AsyncSession,
    job_id: int,
    data: dict[str, Any],
    actor: AuthenticatedUser,
) -> Job:
    repo = JobRepository(session)
    job = await _get_for_update(repo, job_id, actor, "update")
    validate_job_update(job, data)
    return await repo.update_by_id(job_id, **data)


async def delete_job(session: AsyncSession, job_id: int, actor: AuthenticatedUser) -> None:
    repo = JobRepository(session)
    await _get_for_update(repo, job_id, actor, "delete")
    await repo.delete(job_id)
    logger.info(f"Job {job_id} deleted by user {actor.id}")


async def update_job_status(
    session: AsyncSession,
    job_id: int,
    status: Any,
    actor: AuthenticatedUser,
) -> Job:
    repo = JobRepository(session)
    await _get_for_update(repo, job_id, actor, "update status of")
    status_enum = parse_enum(JobStatus, status, "job status")
    job = await repo.update_by_id(job_id, status=status_enum)
    logger.info(f"Job {job_id} status set to {status_enum.value} by user {actor.id}")
    return job


async def publish_job(session: AsyncSession, job_id: int, actor: AuthenticatedUser) -> Job:
    return await update_job_status(session, job_id, JobStatus.PUBLISHED, actor)


async def close_job(session: AsyncSession, job_id: int, actor: AuthenticatedUser) -> Job:
    return await update_job_status(session, job_id, JobStatus.CLOSED, actor)


# ==================== Queries ==================== #

async def get_job(session: AsyncSession, job_id: int) -> Job:
    job = await JobRepository(session).get_by_id(job_id)
    if job is None:
        raise NotFoundError(f"Job {job_id} not found")
    return job


async def get_active_jobs(
    session: AsyncSession, limit: Optional[int] = None, offset: int = 0
) -> tuple[Sequence[Job], int]:
    repo = JobRepository(session)
    return await repo.find_active(limit=limit, offset=offset), await repo.count_active()


async def search_jobs(session: AsyncSession, term: Optional[str]) -> Sequence[Job]:
    if not term or not term.strip():
        raise ValidationError("Search term is required")
    return await JobRepository(session).search(term.strip())


async def get_jobs_by_filters(
    session: AsyncSession,
    department: Optional[str] = None,
    location: Optional[str] = None,
    employment_type: Optional[str] = None,
    experience_level: Optional[str] = None,
    is_remote: Optional[bool] = None,
    salary_min: Optional[float] = None,
    salary_max: Optional[float] = None,
) -> Sequence[Job]:
    return await JobRepository(session).find_by_filters(
        department=department,
        location=location,
        employment_type=(
            parse_enum(EmploymentType, employment_type, "employment type")
            if employment_type else None
        ),
        experience_level=(
            parse_enum(ExperienceLevel, experience_level, "experience level")
            if experience_level else None
        ),
        is_remote=is_remote,
        salary_min=salary_min,
        salary_max=salary_max,
    )


async def get_jobs_by_department(session: AsyncSession, department: str) -> Sequence[Job]:
    if not department or not department.strip():
        raise ValidationError("Department is required")
    return await JobRepository(session).find_by_department(department.strip())


async def get_remote_jobs(session: AsyncSession) -> Sequence[Job]:
    return await JobRepository(session).find_remote()


async def get_urgent_jobs(session: AsyncSession) -> Sequence[Job]:
    return await JobRepository(session).find_urgent()


async def get_jobs_expiring_soon(session: AsyncSession, days: int = 7) -> Sequence[Job]:
    if days < 1:
        raise ValidationError("Days must be at least 1")
    return await JobRepository(session).find_expiring_soon(days)


async def get_job_statistics(session: AsyncSession) -> dict[str, Any]:
    return await JobRepository(session).get_statistics()


async def get_jobs_by_user(session: AsyncSession, user_id: int) -> Sequence[Job]:
    return await JobRepository(session).find_by_user(user_id)
