"""User persistence."""

from typing import Optional, Sequence

from sqlalchemy import select, update

from core.utils.datetime import now
from database.models.users import User, UserRole
from database.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool:
        conditions = [User.email == email.strip().lower()]
        if exclude_id is not None:
            conditions.append(User.id != exclude_id)
        return await self.exists(*conditions)

    async def find_active(self) -> Sequence[User]:
        return await self.list(is_active=True)

    async def find_by_role(self, role: UserRole) -> Sequence[User]:
        return await self.list(role=role)

    async def update_last_login(self, user_id: int) -> None:
        await self.session.execute(
            update(User).where(User.id == user_id).values(last_login_at=now())
        )
        await self.session.commit()
