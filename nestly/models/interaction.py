from sqlalchemy import Column, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import relationship, synonym
from sqlalchemy.types import Uuid

from .base import BaseModel


class Interaction(BaseModel):
    """One directed message between two users.

    Rows are append-only. ``timestamp`` is the client send instant and drives
    ordering; ``recorded_at`` is the store's own creation instant.
    """

    __tablename__ = "interactions"

    # updated_at, deleted_at are inherited but never change for interactions
    sender_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    counterpart_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    message = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    recorded_at = synonym("created_at")

    sender = relationship(
        "User", back_populates="sent_interactions", foreign_keys=[sender_id]
    )
    counterpart = relationship(
        "User", back_populates="received_interactions", foreign_keys=[counterpart_id]
    )

    __table_args__ = (
        Index("ix_interactions_sender_counterpart", "sender_id", "counterpart_id"),
        Index("ix_interactions_counterpart_sender", "counterpart_id", "sender_id"),
    )
