import logging
from datetime import datetime, timezone
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from nestly.models import User
from nestly.repositories.interaction_repository import InteractionRepository
from nestly.repositories.listing_repository import ListingRepository
from nestly.repositories.user_repository import UserRepository
from nestly.schemas.conversation import ConversationThread
from nestly.schemas.interaction import InteractionRead

from .exceptions import (
    EmptyMessageError,
    ListingNotFoundError,
    MessageTooLongError,
    PersistenceError,
    SelfMessagingError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 500


def _as_utc(instant: datetime) -> datetime:
    # Naive input is taken to be UTC already
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def counterpart_of(interaction: Any, viewer_id: UUID) -> UUID:
    """Returns the participant of ``interaction`` who is not the viewer."""
    if interaction.sender_id == viewer_id:
        return interaction.counterpart_id
    return interaction.sender_id


def build_conversations(
    interactions: Iterable[Any], viewer_id: UUID
) -> list[ConversationThread]:
    """
    Groups a viewer's interactions into one thread per counterpart.

    Every interaction must involve ``viewer_id``; this function does not
    filter. Messages inside a thread are ordered by timestamp with ties kept
    in input (insertion) order, and threads are ordered by the timestamp of
    their last message, most recent first. Threads with equal recency keep
    the order in which their counterpart first appeared in the input.

    Accepts ORM rows or InteractionRead models.
    """
    groups: dict[UUID, list[InteractionRead]] = {}
    for interaction in interactions:
        record = InteractionRead.model_validate(interaction)
        groups.setdefault(counterpart_of(record, viewer_id), []).append(record)

    threads = []
    for other, records in groups.items():
        messages = sorted(records, key=lambda m: m.timestamp)
        threads.append(
            ConversationThread(
                counterpart_id=other,
                messages=messages,
                last_message=messages[-1],
            )
        )

    threads.sort(key=lambda t: t.last_message.timestamp, reverse=True)
    return threads


def append_to_thread(
    thread: ConversationThread, interaction: Any
) -> ConversationThread:
    """Returns a copy of ``thread`` with ``interaction`` placed in timestamp order.

    Equal timestamps go after existing messages, matching insertion order.
    """
    record = InteractionRead.model_validate(interaction)
    messages = sorted([*thread.messages, record], key=lambda m: m.timestamp)
    return thread.model_copy(
        update={"messages": messages, "last_message": messages[-1]}
    )


def validate_message(viewer_id: UUID, counterpart_id: UUID, raw_text: str) -> str:
    """Checks a message before it is stored and returns the trimmed text.

    Rules are checked in order and the first failure is raised.
    """
    text = (raw_text or "").strip()
    if not text:
        raise EmptyMessageError()
    if len(text) > MAX_MESSAGE_LENGTH:
        raise MessageTooLongError(
            f"Message must be at most {MAX_MESSAGE_LENGTH} characters."
        )
    if viewer_id == counterpart_id:
        raise SelfMessagingError()
    return text


class ConversationService:
    def __init__(
        self,
        interaction_repository: InteractionRepository,
        user_repository: UserRepository,
        listing_repository: ListingRepository,
    ):
        self.interaction_repo = interaction_repository
        self.user_repo = user_repository
        self.listing_repo = listing_repository
        # The session is shared via the repositories
        self.session = interaction_repository.session

    async def compose_message(
        self,
        viewer_id: UUID,
        counterpart_id: UUID,
        raw_text: str,
        sent_at: datetime | None = None,
    ) -> InteractionRead:
        """
        Validates and stores a new outbound message.

        Validation failures raise before any store call. On success exactly
        one interaction is inserted and the stored record is returned,
        including its store-assigned id and recorded_at.

        Raises:
            EmptyMessageError, MessageTooLongError, SelfMessagingError:
                The message was rejected.
            UserNotFoundError: The counterpart does not exist.
            PersistenceError: The store failed; the session is rolled back.
        """
        text = validate_message(viewer_id, counterpart_id, raw_text)

        try:
            counterpart = await self.user_repo.get_user_by_id(counterpart_id)
            if counterpart is None:
                raise UserNotFoundError(f"User with ID '{counterpart_id}' not found.")

            interaction = await self.interaction_repo.create_interaction(
                sender_id=viewer_id,
                counterpart_id=counterpart_id,
                message=text,
                timestamp=_as_utc(sent_at or datetime.now(timezone.utc)),
            )
            await self.session.commit()
            await self.session.refresh(interaction)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database error sending message: {e}", exc_info=True)
            raise PersistenceError("Failed to send message. Please try again.")

        logger.info(
            f"Interaction {interaction.id} stored from {viewer_id} to {counterpart_id}"
        )
        return InteractionRead.model_validate(interaction)

    async def list_conversations(self, viewer: User) -> list[ConversationThread]:
        """Builds every thread the viewer takes part in, most recent first."""
        try:
            interactions = await self.interaction_repo.query_by_participant(viewer.id)
            threads = build_conversations(interactions, viewer.id)
            names = await self._counterpart_names(t.counterpart_id for t in threads)
        except SQLAlchemyError as e:
            logger.error(
                f"Database error listing conversations for user {viewer.id}: {e}",
                exc_info=True,
            )
            raise PersistenceError(
                "Failed to list conversations due to a database error."
            )

        return [
            t.model_copy(update={"counterpart_name": names.get(t.counterpart_id)})
            for t in threads
        ]

    async def get_thread(
        self, viewer: User, counterpart_id: UUID
    ) -> ConversationThread:
        """Loads the thread between the viewer and one counterpart.

        An empty history yields a thread without messages.
        """
        try:
            interactions = await self.interaction_repo.query_by_participant(
                viewer.id, counterpart_id
            )
            names = await self._counterpart_names([counterpart_id])
        except SQLAlchemyError as e:
            logger.error(
                f"Database error loading thread {viewer.id}/{counterpart_id}: {e}",
                exc_info=True,
            )
            raise PersistenceError("Failed to load conversation due to a database error.")

        threads = build_conversations(interactions, viewer.id)
        thread = threads[0] if threads else ConversationThread(counterpart_id=counterpart_id)
        return thread.model_copy(
            update={"counterpart_name": names.get(counterpart_id)}
        )

    async def send_message(
        self, viewer: User, counterpart_id: UUID, raw_text: str
    ) -> InteractionRead:
        return await self.compose_message(viewer.id, counterpart_id, raw_text)

    async def reply_in_thread(
        self, viewer: User, counterpart_id: UUID, raw_text: str
    ) -> ConversationThread:
        """Sends a message and returns the thread it was added to.

        The thread is loaded once and the stored interaction is appended to
        it, instead of reloading the whole history.
        """
        thread = await self.get_thread(viewer, counterpart_id)
        stored = await self.compose_message(viewer.id, counterpart_id, raw_text)
        return append_to_thread(thread, stored)

    async def contact_host(
        self, viewer: User, listing_id: UUID, raw_text: str
    ) -> InteractionRead:
        """Sends a message to the owner of a listing."""
        try:
            listing = await self.listing_repo.get_listing_by_id(listing_id)
        except SQLAlchemyError as e:
            logger.error(f"Database error loading listing {listing_id}: {e}", exc_info=True)
            raise PersistenceError("Failed to load listing due to a database error.")
        if listing is None:
            raise ListingNotFoundError(f"Listing with ID '{listing_id}' not found.")

        return await self.compose_message(viewer.id, listing.owner_id, raw_text)

    async def _counterpart_names(self, user_ids: Iterable[UUID]) -> dict[UUID, str]:
        users = await self.user_repo.get_users_by_ids(user_ids)
        return {user.id: user.name for user in users if user.name}
