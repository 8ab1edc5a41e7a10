import uuid

from fastapi_users.db import SQLAlchemyBaseUserTable
from sqlalchemy import Column, Text
from sqlalchemy.orm import relationship

from .base import BaseModel


# SQLAlchemyBaseUserTable supplies email, hashed_password, is_active,
# is_superuser and is_verified; id and timestamps come from BaseModel.
class User(SQLAlchemyBaseUserTable[uuid.UUID], BaseModel):
    __tablename__ = "users"

    name = Column(Text, nullable=False, default="")

    # String forward references avoid circular imports at module level
    listings = relationship(
        "Listing",
        back_populates="owner",
        foreign_keys="Listing.owner_id",
    )
    sent_interactions = relationship(
        "Interaction",
        back_populates="sender",
        foreign_keys="Interaction.sender_id",
    )
    received_interactions = relationship(
        "Interaction",
        back_populates="counterpart",
        foreign_keys="Interaction.counterpart_id",
    )
