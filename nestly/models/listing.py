from sqlalchemy import Boolean, Column, ForeignKey, Numeric, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression
from sqlalchemy.types import Uuid

from .base import BaseModel


class Listing(BaseModel):
    __tablename__ = "listings"

    # id, created_at, updated_at, deleted_at are inherited from BaseModel
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2, asdecimal=True), nullable=False)
    location = Column(Text, nullable=False)
    availability = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )

    owner = relationship("User", back_populates="listings", foreign_keys=[owner_id])
