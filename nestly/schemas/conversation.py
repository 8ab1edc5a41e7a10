from uuid import UUID

from pydantic import BaseModel, computed_field

from .interaction import InteractionRead


class ConversationThread(BaseModel):
    """All interactions between the viewer and one counterpart, oldest first."""

    counterpart_id: UUID
    counterpart_name: str | None = None
    messages: list[InteractionRead] = []
    last_message: InteractionRead | None = None

    @computed_field
    @property
    def message_count(self) -> int:
        return len(self.messages)


# Listing view of a thread: the messages themselves are left out
class ConversationSummary(BaseModel):
    counterpart_id: UUID
    counterpart_name: str | None = None
    last_message: InteractionRead
    message_count: int

    @classmethod
    def from_thread(cls, thread: ConversationThread) -> "ConversationSummary":
        return cls(
            counterpart_id=thread.counterpart_id,
            counterpart_name=thread.counterpart_name,
            last_message=thread.last_message,
            message_count=thread.message_count,
        )
