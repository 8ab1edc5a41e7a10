import logging
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Sequence, TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from nestly.models import Listing, User
from nestly.repositories.listing_repository import ListingRepository
from nestly.schemas.listing import (
    ListingCreate,
    ListingDraft,
    ListingUpdateRequest,
    SortKey,
)
from nestly.schemas.validation import ValidationErrorCode

from .exceptions import (
    ListingNotFoundError,
    ListingValidationError,
    NotAuthorizedError,
    PersistenceError,
)

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 20
MIN_LOCATION_LENGTH = 3

# Matches the listings.price column, Numeric(10, 2)
PRICE_STEP = Decimal("0.01")
MAX_PRICE = Decimal("99999999.99")

T = TypeVar("T")


def _matches(listing: Any, needle: str) -> bool:
    return any(
        needle in (getattr(listing, field) or "").lower()
        for field in ("title", "location", "description")
    )


def discover(listings: Iterable[T], query: str, sort: SortKey) -> list[T]:
    """
    Filters listings by a free-text query and sorts them.

    The query is matched case-insensitively as a substring of the title,
    location or description, as typed (surrounding spaces included); only
    an empty query keeps everything. All sorts are stable, so listings with
    equal keys keep their input order.
    """
    needle = (query or "").lower()
    selected = [item for item in listings if not needle or _matches(item, needle)]

    if sort == SortKey.OLDEST:
        return sorted(selected, key=lambda item: item.created_at)
    if sort == SortKey.PRICE_ASC:
        return sorted(selected, key=lambda item: item.price)
    if sort == SortKey.PRICE_DESC:
        return sorted(selected, key=lambda item: item.price, reverse=True)
    return sorted(selected, key=lambda item: item.created_at, reverse=True)


def parse_price(value: Any) -> Decimal | None:
    """
    Returns the price as a positive Decimal in whole cents, or None if it is
    not one.

    Values with sub-cent digits or beyond MAX_PRICE are rejected rather than
    rounded, so what is validated is exactly what gets stored.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not price.is_finite() or price <= 0 or price > MAX_PRICE:
        return None
    cents = price.quantize(PRICE_STEP)
    if cents != price:
        return None
    return cents


def _check_text(
    value: str | None,
    min_length: int,
    required: ValidationErrorCode,
    too_short: ValidationErrorCode,
) -> ValidationErrorCode | None:
    text = (value or "").strip()
    if not text:
        return required
    if len(text) < min_length:
        return too_short
    return None


def validate_listing_draft(draft: ListingDraft) -> list[ValidationErrorCode]:
    """Returns every rule the draft breaks; an empty list means it is valid."""
    errors = [
        _check_text(
            draft.title,
            MIN_TITLE_LENGTH,
            ValidationErrorCode.TITLE_REQUIRED,
            ValidationErrorCode.TITLE_TOO_SHORT,
        ),
        _check_text(
            draft.description,
            MIN_DESCRIPTION_LENGTH,
            ValidationErrorCode.DESCRIPTION_REQUIRED,
            ValidationErrorCode.DESCRIPTION_TOO_SHORT,
        ),
        None if parse_price(draft.price) is not None else ValidationErrorCode.INVALID_PRICE,
        _check_text(
            draft.location,
            MIN_LOCATION_LENGTH,
            ValidationErrorCode.LOCATION_REQUIRED,
            ValidationErrorCode.LOCATION_TOO_SHORT,
        ),
    ]
    return [error for error in errors if error is not None]


def normalize_listing_draft(draft: ListingDraft) -> ListingCreate:
    """Trims text fields and coerces the price. The draft must be valid."""
    return ListingCreate(
        title=draft.title.strip(),
        description=draft.description.strip(),
        price=parse_price(draft.price),
        location=draft.location.strip(),
        availability=draft.availability,
    )


class ListingService:
    def __init__(self, listing_repository: ListingRepository):
        self.listing_repo = listing_repository
        self.session = listing_repository.session

    async def create_listing(self, owner: User, draft: ListingDraft) -> Listing:
        """Validates a draft and stores it as a new listing owned by ``owner``."""
        errors = validate_listing_draft(draft)
        if errors:
            raise ListingValidationError(errors)

        try:
            listing = await self.listing_repo.create_listing(
                owner.id, normalize_listing_draft(draft)
            )
            await self.session.commit()
            await self.session.refresh(listing)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database error creating listing: {e}", exc_info=True)
            raise PersistenceError("Failed to create listing due to a database error.")

        logger.info(f"Listing {listing.id} created by user {owner.id}")
        return listing

    async def get_listing(self, listing_id: UUID) -> Listing:
        try:
            listing = await self.listing_repo.get_listing_by_id(listing_id)
        except SQLAlchemyError as e:
            logger.error(f"Database error loading listing {listing_id}: {e}", exc_info=True)
            raise PersistenceError("Failed to load listing due to a database error.")
        if listing is None:
            raise ListingNotFoundError(f"Listing with ID '{listing_id}' not found.")
        return listing

    async def _get_owned_listing(self, owner: User, listing_id: UUID) -> Listing:
        listing = await self.get_listing(listing_id)
        if listing.owner_id != owner.id:
            raise NotAuthorizedError("Only the owner can change this listing.")
        return listing

    async def update_listing(
        self, owner: User, listing_id: UUID, changes: ListingUpdateRequest
    ) -> Listing:
        """
        Applies a partial update to one of the owner's listings.

        The changes are merged over the stored values and the result is
        validated with the same rules as a new listing. On any failure the
        stored listing is left unchanged.
        """
        listing = await self._get_owned_listing(owner, listing_id)

        updates = changes.model_dump(exclude_unset=True)
        if updates.get("availability") is None:
            updates.pop("availability", None)
        merged = ListingDraft(
            title=listing.title,
            description=listing.description,
            price=str(listing.price),
            location=listing.location,
            availability=listing.availability,
        ).model_copy(update=updates)

        errors = validate_listing_draft(merged)
        if errors:
            raise ListingValidationError(errors)

        normalized = normalize_listing_draft(merged).model_dump()
        try:
            listing = await self.listing_repo.update_listing(
                listing, {field: normalized[field] for field in updates}
            )
            await self.session.commit()
            await self.session.refresh(listing)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database error updating listing {listing_id}: {e}", exc_info=True)
            raise PersistenceError("Failed to update listing due to a database error.")

        logger.info(f"Listing {listing.id} updated by user {owner.id}")
        return listing

    async def delete_listing(self, owner: User, listing_id: UUID) -> None:
        listing = await self._get_owned_listing(owner, listing_id)
        try:
            await self.listing_repo.delete_listing(listing)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database error deleting listing {listing_id}: {e}", exc_info=True)
            raise PersistenceError("Failed to delete listing due to a database error.")
        logger.info(f"Listing {listing_id} deleted by user {owner.id}")

    async def browse_listings(self, query: str, sort: SortKey) -> Sequence[Listing]:
        """Available listings matching the query, in the requested order."""
        try:
            listings = await self.listing_repo.query_available()
        except SQLAlchemyError as e:
            logger.error(f"Database error browsing listings: {e}", exc_info=True)
            raise PersistenceError("Failed to list listings due to a database error.")
        return discover(listings, query, sort)

    async def owner_listings(
        self, owner: User, query: str, sort: SortKey
    ) -> Sequence[Listing]:
        """All of the owner's listings, available or not."""
        try:
            listings = await self.listing_repo.query_by_owner(owner.id)
        except SQLAlchemyError as e:
            logger.error(
                f"Database error listing listings of user {owner.id}: {e}", exc_info=True
            )
            raise PersistenceError("Failed to list listings due to a database error.")
        return discover(listings, query, sort)
