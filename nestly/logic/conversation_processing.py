import logging
from uuid import UUID

# Logic related to processing conversation actions, decoupled from API routes.
from nestly.models import User
from nestly.schemas.conversation import ConversationSummary, ConversationThread
from nestly.schemas.interaction import InteractionRead
from nestly.services.conversation_service import ConversationService
from nestly.services.exceptions import ServiceError

logger = logging.getLogger(__name__)


async def handle_list_my_conversations(
    viewer: User,
    conv_service: ConversationService,
) -> list[ConversationSummary]:
    """Returns the viewer's conversations, most recently active first."""
    threads = await conv_service.list_conversations(viewer)
    return [ConversationSummary.from_thread(thread) for thread in threads]


async def handle_get_thread(
    counterpart_id: UUID,
    viewer: User,
    conv_service: ConversationService,
) -> ConversationThread:
    """Retrieves the full thread between the viewer and one counterpart."""
    logger.debug(f"Handler: Getting thread {viewer.id}/{counterpart_id}")
    return await conv_service.get_thread(viewer, counterpart_id)


async def handle_send_message(
    counterpart_id: UUID,
    message: str,
    sender: User,
    conv_service: ConversationService,
) -> InteractionRead:
    """
    Handles sending a message to another user.

    Raises:
        MessageValidationError: The message was rejected (empty, too long,
            or addressed to the sender).
        UserNotFoundError: The counterpart does not exist.
        PersistenceError: The store failed.
    """
    try:
        return await conv_service.send_message(sender, counterpart_id, message)
    except ServiceError as e:
        logger.info(f"Handler: Service error sending message to {counterpart_id}: {e}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error in handle_send_message: {e}", exc_info=True)
        raise ServiceError("An unexpected error occurred while sending the message.")


async def handle_reply_in_thread(
    counterpart_id: UUID,
    message: str,
    sender: User,
    conv_service: ConversationService,
) -> ConversationThread:
    """Handles the reply box of a conversation page; returns the updated thread."""
    try:
        return await conv_service.reply_in_thread(sender, counterpart_id, message)
    except ServiceError as e:
        logger.info(f"Handler: Service error replying to {counterpart_id}: {e}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error in handle_reply_in_thread: {e}", exc_info=True)
        raise ServiceError("An unexpected error occurred while sending the message.")


async def handle_contact_host(
    listing_id: UUID,
    message: str,
    sender: User,
    conv_service: ConversationService,
) -> InteractionRead:
    """Handles the 'contact host' form on a listing page."""
    try:
        return await conv_service.contact_host(sender, listing_id, message)
    except ServiceError as e:
        logger.info(f"Handler: Service error contacting host of {listing_id}: {e}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error in handle_contact_host: {e}", exc_info=True)
        raise ServiceError("An unexpected error occurred while contacting the host.")
