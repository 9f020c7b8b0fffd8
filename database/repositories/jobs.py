"""Job posting persistence and queries."""

from typing import Any, Optional, Sequence

from sqlalchemy import String, cast, func, or_

from core.utils.datetime import days_from_now, now
from database.models.jobs import EmploymentType, ExperienceLevel, Job, JobStatus
from database.repositories.base import BaseRepository


def _open_deadline():
    return or_(Job.application_deadline.is_(None), Job.application_deadline > now())


class JobRepository(BaseRepository[Job]):
    model = Job

    async def find_active(
        self, limit: Optional[int] = None, offset: int = 0
    ) -> Sequence[Job]:
        """Published jobs whose deadline has not passed."""
        return await self.list(
            Job.status == JobStatus.PUBLISHED,
            _open_deadline(),
            limit=limit,
            offset=offset,
        )

    async def count_active(self) -> int:
        return await self.count(Job.status == JobStatus.PUBLISHED, _open_deadline())

    async def find_by_department(self, department: str) -> Sequence[Job]:
        return await self.list(
            func.lower(Job.department) == department.lower(),
            Job.status == JobStatus.PUBLISHED,
        )

    async def find_remote(self) -> Sequence[Job]:
        return await self.list(Job.is_remote.is_(True), Job.status == JobStatus.PUBLISHED)

    async def find_urgent(self) -> Sequence[Job]:
        return await self.list(Job.is_urgent.is_(True), Job.status == JobStatus.PUBLISHED)

    async def find_expiring_soon(self, days: int = 7) -> Sequence[Job]:
        """Published jobs whose deadline falls within the next ``days`` days."""
        return await self.list(
            Job.status == JobStatus.PUBLISHED,
            Job.application_deadline > now(),
            Job.application_deadline <= days_from_now(days),
            order_by=Job.application_deadline.asc(),
        )

    async def search(self, term: str) -> Sequence[Job]:
        """Case-insensitive match on title, description, department and tags."""
        pattern = f"%{term.lower()}%"
        return await self.list(
            Job.status == JobStatus.PUBLISHED,
            or_(
                func.lower(Job.title).like(pattern),
                func.lower(Job.description).like(pattern),
                func.lower(Job.department).like(pattern),
                func.lower(cast(Job.tags, String)).like(pattern),
            ),
        )

    async def find_by_filters(
        self,
        department: Optional[str] = None,
        location: Optional[str] = None,
        employment_type: Optional[EmploymentType] = None,
        experience_level: Optional[ExperienceLevel] = None,
        is_remote: Optional[bool] = None,
        salary_min: Optional[float] = None,
        salary_max: Optional[float] = None,
    ) -> Sequence[Job]:
        conditions: list[Any] = [Job.status == JobStatus.PUBLISHED]
        if department:
            conditions.append(func.lower(Job.department) == department.lower())
        if location:
            conditions.append(func.lower(Job.location).like(f"%{location.lower()}%"))
        if employment_type is not None:
            conditions.append(Job.employment_type == employment_type)
        if experience_level is not None:
            conditions.append(Job.experience_level == experience_level)
        if is_remote is not None:
            conditions.append(Job.is_remote.is_(is_remote))
        # Ranges overlap with the requested band
        if salary_min is not None:
            conditions.append(or_(Job.salary_max.is_(None), Job.salary_max >= salary_min))
        if salary_max is not None:
            conditions.append(or_(Job.salary_min.is_(None), Job.salary_min <= salary_max))
        return await self.list(*conditions)

    async def find_by_user(self, user_id: int) -> Sequence[Job]:
        return await self.list(posted_by_id=user_id)

    async def get_statistics(self) -> dict[str, Any]:
        by_status = await self.group_count(Job.status)
        by_department = await self.group_count(Job.department)
        by_remote = await self.group_count(Job.is_remote)
        return {
            "total": sum(by_status.values()),
            "active": await self.count_active(),
            "by_status": {status.value: count for status, count in by_status.items()},
            "by_department": by_department,
            "remote": by_remote.get(True, 0),
            "on_site": by_remote.get(False, 0),
        }
