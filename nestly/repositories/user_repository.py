from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nestly.models import User

from .base import BaseRepository


class UserRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_user_by_id(self, user_id: UUID) -> User | None:
        """Retrieves a user by their ID."""
        stmt = select(User).filter(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_user_by_email(self, email: str) -> User | None:
        stmt = select(User).filter(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_users_by_ids(self, user_ids: Iterable[UUID]) -> Sequence[User]:
        """Retrieves the users matching the given IDs; unknown IDs are skipped."""
        ids = list(user_ids)
        if not ids:
            return []
        stmt = select(User).filter(User.id.in_(ids))
        result = await self.session.execute(stmt)
        return result.scalars().all()
