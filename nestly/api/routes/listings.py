import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from nestly.api.common import BaseRouter
from nestly.auth_config import current_active_user
from nestly.logic.conversation_processing import handle_contact_host
from nestly.logic.listing_processing import (
    handle_browse_listings,
    handle_create_listing,
    handle_delete_listing,
    handle_get_listing,
    handle_list_my_listings,
    handle_update_listing,
)
from nestly.models import User
from nestly.schemas.interaction import InteractionRead, MessageCreateRequest
from nestly.schemas.listing import (
    ListingDraft,
    ListingRead,
    ListingUpdateRequest,
    SortKey,
)
from nestly.services.conversation_service import ConversationService
from nestly.services.dependencies import (
    get_conversation_service,
    get_listing_service,
)
from nestly.services.listing_service import ListingService

logger = logging.getLogger(__name__)
listings_router_instance = APIRouter()
router = BaseRouter(router=listings_router_instance, default_tags=["listings"])


@router.get("/listings", response_model=list[ListingRead])
async def browse_listings(
    q: str = Query(default=""),
    sort: SortKey = Query(default=SortKey.NEWEST),
    listing_service: ListingService = Depends(get_listing_service),
):
    """Lists available listings matching the search, in the requested order."""
    return await handle_browse_listings(
        query=q, sort=sort, listing_service=listing_service
    )


@router.get("/users/me/listings", response_model=list[ListingRead])
async def list_my_listings(
    q: str = Query(default=""),
    sort: SortKey = Query(default=SortKey.NEWEST),
    user: User = Depends(current_active_user),
    listing_service: ListingService = Depends(get_listing_service),
):
    """Lists all of the current user's listings, including unavailable ones."""
    return await handle_list_my_listings(
        owner=user, query=q, sort=sort, listing_service=listing_service
    )


@router.post(
    "/listings",
    response_model=ListingRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_listing(
    draft: ListingDraft,
    user: User = Depends(current_active_user),
    listing_service: ListingService = Depends(get_listing_service),
):
    return await handle_create_listing(
        draft=draft, owner=user, listing_service=listing_service
    )


@router.get("/listings/{listing_id}", response_model=ListingRead)
async def get_listing(
    listing_id: UUID,
    listing_service: ListingService = Depends(get_listing_service),
):
    return await handle_get_listing(
        listing_id=listing_id, listing_service=listing_service
    )


@router.patch("/listings/{listing_id}", response_model=ListingRead)
async def update_listing(
    listing_id: UUID,
    changes: ListingUpdateRequest,
    user: User = Depends(current_active_user),
    listing_service: ListingService = Depends(get_listing_service),
):
    """Updates one of the current user's listings."""
    return await handle_update_listing(
        listing_id=listing_id,
        changes=changes,
        owner=user,
        listing_service=listing_service,
    )


@router.delete("/listings/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_listing(
    listing_id: UUID,
    user: User = Depends(current_active_user),
    listing_service: ListingService = Depends(get_listing_service),
):
    await handle_delete_listing(
        listing_id=listing_id, owner=user, listing_service=listing_service
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/listings/{listing_id}/messages",
    response_model=InteractionRead,
    status_code=status.HTTP_201_CREATED,
    tags=["conversations"],
)
async def contact_host(
    listing_id: UUID,
    request_data: MessageCreateRequest,
    user: User = Depends(current_active_user),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    """Sends a message to the owner of the listing."""
    return await handle_contact_host(
        listing_id=listing_id,
        message=request_data.message,
        sender=user,
        conv_service=conv_service,
    )
