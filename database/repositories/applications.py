"""Career application persistence and queries."""

from typing import Any, Optional, Sequence

from sqlalchemy import func, or_

from core.utils.datetime import days_ago
from database.models.applications import ApplicationStatus, CareerApplication
from database.repositories.base import BaseRepository


class CareerApplicationRepository(BaseRepository[CareerApplication]):
    model = CareerApplication

    def _newest_first(self):
        return CareerApplication.applied_at.desc()

    async def find_filtered(
        self,
        status: Optional[ApplicationStatus] = None,
        position: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[Sequence[CareerApplication], int]:
        """Page of applications plus the total matching count."""
        conditions: list[Any] = []
        if status is not None:
            conditions.append(CareerApplication.status == status)
        if position:
            conditions.append(
                func.lower(CareerApplication.position).like(f"%{position.lower()}%")
            )
        items = await self.list(
            *conditions, order_by=self._newest_first(), limit=limit, offset=offset
        )
        return items, await self.count(*conditions)

    async def find_by_status(self, status: ApplicationStatus) -> Sequence[CareerApplication]:
        return await self.list(status=status, order_by=self._newest_first())

    async def find_recent(self, days: int = 7) -> Sequence[CareerApplication]:
        return await self.list(
            CareerApplication.applied_at >= days_ago(days),
            order_by=self._newest_first(),
        )

    async def find_by_position(self, position: str) -> Sequence[CareerApplication]:
        return await self.list(
            func.lower(CareerApplication.position).like(f"%{position.lower()}%"),
            order_by=self._newest_first(),
        )

    async def find_by_email(self, email: str) -> Sequence[CareerApplication]:
        return await self.list(
            email=email.strip().lower(), order_by=self._newest_first()
        )

    async def search(self, term: str) -> Sequence[CareerApplication]:
        """Case-insensitive match on name, email and position."""
        pattern = f"%{term.lower()}%"
        return await self.list(
            or_(
                func.lower(CareerApplication.first_name).like(pattern),
                func.lower(CareerApplication.last_name).like(pattern),
                func.lower(CareerApplication.email).like(pattern),
                func.lower(CareerApplication.position).like(pattern),
            ),
            order_by=self._newest_first(),
        )

    async def get_statistics(self) -> dict[str, Any]:
        by_status = await self.group_count(CareerApplication.status)
        return {
            "total": sum(by_status.values()),
            "recent": await self.count(CareerApplication.applied_at >= days_ago(7)),
            "by_status": {status.value: count for status, count in by_status.items()},
        }
