from fastapi import Depends

from nestly.repositories.dependencies import (
    get_interaction_repository,
    get_listing_repository,
    get_user_repository,
)
from nestly.repositories.interaction_repository import InteractionRepository
from nestly.repositories.listing_repository import ListingRepository
from nestly.repositories.user_repository import UserRepository

from .conversation_service import ConversationService
from .listing_service import ListingService


# Services are built per request because they hold the request's session.
def get_conversation_service(
    interaction_repo: InteractionRepository = Depends(get_interaction_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    listing_repo: ListingRepository = Depends(get_listing_repository),
) -> ConversationService:
    """Provides an instance of the ConversationService with its dependencies."""
    return ConversationService(
        interaction_repository=interaction_repo,
        user_repository=user_repo,
        listing_repository=listing_repo,
    )


def get_listing_service(
    listing_repo: ListingRepository = Depends(get_listing_repository),
) -> ListingService:
    """Provides an instance of the ListingService."""
    return ListingService(listing_repository=listing_repo)
