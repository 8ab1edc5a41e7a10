import logging
from typing import Sequence
from uuid import UUID

from nestly.models import Listing, User
from nestly.schemas.listing import ListingDraft, ListingUpdateRequest, SortKey
from nestly.services.listing_service import ListingService

logger = logging.getLogger(__name__)


async def handle_browse_listings(
    query: str,
    sort: SortKey,
    listing_service: ListingService,
) -> Sequence[Listing]:
    """Handles the home page search over available listings."""
    return await listing_service.browse_listings(query, sort)


async def handle_list_my_listings(
    owner: User,
    query: str,
    sort: SortKey,
    listing_service: ListingService,
) -> Sequence[Listing]:
    """Handles the host dashboard: every listing of the owner."""
    return await listing_service.owner_listings(owner, query, sort)


async def handle_create_listing(
    draft: ListingDraft,
    owner: User,
    listing_service: ListingService,
) -> Listing:
    """
    Handles the create-listing form.

    Raises:
        ListingValidationError: With every rule the draft broke.
        PersistenceError: The store failed.
    """
    logger.info(f"Creating listing for user {owner.id}")
    return await listing_service.create_listing(owner, draft)


async def handle_get_listing(
    listing_id: UUID,
    listing_service: ListingService,
) -> Listing:
    return await listing_service.get_listing(listing_id)


async def handle_update_listing(
    listing_id: UUID,
    changes: ListingUpdateRequest,
    owner: User,
    listing_service: ListingService,
) -> Listing:
    return await listing_service.update_listing(owner, listing_id, changes)


async def handle_delete_listing(
    listing_id: UUID,
    owner: User,
    listing_service: ListingService,
) -> None:
    await listing_service.delete_listing(owner, listing_id)
