import enum
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class SortKey(str, enum.Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    PRICE_ASC = "price-low"
    PRICE_DESC = "price-high"


# Raw form input; nothing is enforced here so every problem can be
# reported at once by validate_listing_draft.
class ListingDraft(BaseModel):
    title: str | None = None
    description: str | None = None
    price: str | float | None = None
    location: str | None = None
    availability: bool = True


class ListingUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    price: str | float | None = None
    location: str | None = None
    availability: bool | None = None


# Normalised values ready for the store
class ListingCreate(BaseModel):
    title: str
    description: str
    price: Decimal
    location: str
    availability: bool = True


class ListingRead(BaseModel):
    id: UUID
    owner_id: UUID
    title: str
    description: str
    price: Decimal
    location: str
    availability: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
