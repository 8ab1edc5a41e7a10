import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from nestly.api.common import BaseRouter
from nestly.auth_config import current_active_user
from nestly.logic.conversation_processing import (
    handle_get_thread,
    handle_list_my_conversations,
    handle_reply_in_thread,
    handle_send_message,
)
from nestly.models import User
from nestly.schemas.conversation import ConversationSummary, ConversationThread
from nestly.schemas.interaction import InteractionRead, MessageCreateRequest
from nestly.services.conversation_service import ConversationService
from nestly.services.dependencies import get_conversation_service

logger = logging.getLogger(__name__)
conversations_router_instance = APIRouter(prefix="/users/me")
router = BaseRouter(
    router=conversations_router_instance, default_tags=["conversations"]
)


@router.get("/conversations", response_model=list[ConversationSummary])
async def list_my_conversations(
    user: User = Depends(current_active_user),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    """Lists the current user's conversations, most recently active first."""
    return await handle_list_my_conversations(viewer=user, conv_service=conv_service)


@router.get("/conversations/{counterpart_id}", response_model=ConversationThread)
async def get_conversation(
    counterpart_id: UUID,
    user: User = Depends(current_active_user),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    """Retrieves every message exchanged with one counterpart, oldest first."""
    return await handle_get_thread(
        counterpart_id=counterpart_id, viewer=user, conv_service=conv_service
    )


@router.post(
    "/conversations/{counterpart_id}/messages",
    response_model=InteractionRead,
    status_code=status.HTTP_201_CREATED,
    tags=["messages"],
)
async def send_message(
    counterpart_id: UUID,
    request_data: MessageCreateRequest,
    user: User = Depends(current_active_user),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    logger.info(f"User {user.id} sending message to {counterpart_id}")
    return await handle_send_message(
        counterpart_id=counterpart_id,
        message=request_data.message,
        sender=user,
        conv_service=conv_service,
    )


@router.post(
    "/conversations/{counterpart_id}",
    response_model=ConversationThread,
    status_code=status.HTTP_201_CREATED,
    tags=["messages"],
)
async def reply_in_conversation(
    counterpart_id: UUID,
    request_data: MessageCreateRequest,
    user: User = Depends(current_active_user),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    """Sends a message and returns the updated thread."""
    return await handle_reply_in_thread(
        counterpart_id=counterpart_id,
        message=request_data.message,
        sender=user,
        conv_service=conv_service,
    )
