from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from nestly.models import Interaction

from .base import BaseRepository


class InteractionRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def create_interaction(
        self,
        sender_id: UUID,
        counterpart_id: UUID,
        message: str,
        timestamp: datetime,
    ) -> Interaction:
        """Adds a new interaction to the session and flushes it.

        recorded_at is stamped here rather than by the database so that
        insertion order survives the second-resolution server clock.
        """
        new_interaction = Interaction(
            sender_id=sender_id,
            counterpart_id=counterpart_id,
            message=message,
            timestamp=timestamp,
            created_at=datetime.now(timezone.utc),
        )
        self.session.add(new_interaction)
        await self.session.flush()
        return new_interaction

    async def query_by_participant(
        self, user_id: UUID, counterpart_id: UUID | None = None
    ) -> Sequence[Interaction]:
        """Lists interactions touching user_id, oldest first.

        Without counterpart_id every interaction where the user is either
        sender or counterpart is returned; with it, only those exchanged
        between the two users in either direction.
        """
        if counterpart_id is not None:
            condition = or_(
                and_(
                    Interaction.sender_id == user_id,
                    Interaction.counterpart_id == counterpart_id,
                ),
                and_(
                    Interaction.sender_id == counterpart_id,
                    Interaction.counterpart_id == user_id,
                ),
            )
        else:
            condition = or_(
                Interaction.sender_id == user_id,
                Interaction.counterpart_id == user_id,
            )

        stmt = (
            select(Interaction)
            .where(condition)
            .order_by(Interaction.timestamp.asc(), Interaction.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
