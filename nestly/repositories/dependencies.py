from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from nestly.db import get_db_session

from .interaction_repository import InteractionRepository
from .listing_repository import ListingRepository
from .user_repository import UserRepository


def get_interaction_repository(
    session: AsyncSession = Depends(get_db_session),
) -> InteractionRepository:
    return InteractionRepository(session)


def get_listing_repository(
    session: AsyncSession = Depends(get_db_session),
) -> ListingRepository:
    """Dependency provider for ListingRepository."""
    return ListingRepository(session)


def get_user_repository(
    session: AsyncSession = Depends(get_db_session),
) -> UserRepository:
    """Dependency provider for UserRepository."""
    return UserRepository(session)
