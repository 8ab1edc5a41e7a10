from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator


class MessageCreateRequest(BaseModel):
    message: str


class InteractionRead(BaseModel):
    id: UUID
    sender_id: UUID
    counterpart_id: UUID
    message: str
    timestamp: datetime
    recorded_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    # SQLite hands back naive datetimes; every stored instant is UTC
    @field_validator("timestamp", "recorded_at")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
