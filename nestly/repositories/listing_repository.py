from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nestly.models import Listing
from nestly.schemas.listing import ListingCreate

from .base import BaseRepository


class ListingRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def create_listing(self, owner_id: UUID, data: ListingCreate) -> Listing:
        """Creates a listing owned by owner_id."""
        new_listing = Listing(owner_id=owner_id, **data.model_dump())
        self.session.add(new_listing)
        await self.session.flush()
        await self.session.refresh(new_listing)
        return new_listing

    async def get_listing_by_id(self, listing_id: UUID) -> Listing | None:
        """Retrieves a specific listing by its ID."""
        stmt = select(Listing).filter(Listing.id == listing_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def update_listing(
        self, listing: Listing, changes: dict[str, Any]
    ) -> Listing:
        """Applies already-validated changes to a listing."""
        for field, value in changes.items():
            setattr(listing, field, value)
        self.session.add(listing)
        await self.session.flush()
        await self.session.refresh(listing)
        return listing

    async def delete_listing(self, listing: Listing) -> None:
        await self.session.delete(listing)
        await self.session.flush()

    async def query_by_owner(self, owner_id: UUID) -> Sequence[Listing]:
        """Lists every listing of one owner, available or not, newest first."""
        stmt = (
            select(Listing)
            .filter(Listing.owner_id == owner_id)
            .order_by(Listing.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def query_available(self) -> Sequence[Listing]:
        """Lists listings open for booking, newest first."""
        stmt = (
            select(Listing)
            .filter(Listing.availability.is_(True))
            .order_by(Listing.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
