from typing import Annotated

from fastapi import (
    APIRouter,
    Depends,
    Header,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from pydantic import UUID4

from app.dependencies import ViewerId, get_chat_service, get_presence_service
from app.models.message import Conversation, Message
from app.schemas.requests import MessageRequest
from app.services.chat import ChatService
from app.services.presence import PresenceService

router = APIRouter(prefix="/chat", tags=["chat"])

ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
PresenceServiceDep = Annotated[PresenceService, Depends(get_presence_service)]


@router.get("/conversations", response_model=list[Conversation])
async def get_conversations(
    viewer_id: ViewerId, chat_service: ChatServiceDep
) -> list[Conversation]:
    """Get one conversation per match, most recent activity first."""
    return await chat_service.get_conversations(viewer_id)


@router.get("/messages/{match_id}", response_model=list[Message])
async def get_messages(
    match_id: UUID4, viewer_id: ViewerId, chat_service: ChatServiceDep
) -> list[Message]:
    return await chat_service.get_messages(viewer_id, match_id)


@router.post(
    "/messages/{match_id}",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    match_id: UUID4,
    request: MessageRequest,
    viewer_id: ViewerId,
    chat_service: ChatServiceDep,
) -> Message:
    """Send a message to the other user of a match.

    Args:
        match_id: ID of the match
        request: The message content
        viewer_id: The current viewer
        chat_service: Chat service

    Returns:
        The stored message
    """
    return await chat_service.send_message(viewer_id, match_id, request.content)


@router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: UUID4, viewer_id: ViewerId, chat_service: ChatServiceDep
) -> None:
    await chat_service.delete_message(viewer_id, message_id)


@router.websocket("/ws")
async def chat_connection(
    websocket: WebSocket,
    presence: PresenceServiceDep,
    x_user_id: Annotated[UUID4 | None, Header()] = None,
) -> None:
    """Live connection of a viewer; the viewer is online while it is open.

    Incoming frames are read and ignored. Message delivery over the
    connection belongs to the transport layer.

    Args:
        websocket: The client connection
        presence: Presence tracker
        x_user_id: Identity of the viewer
    """
    if x_user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await presence.connect(x_user_id)
    try:
        await websocket.accept()
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await presence.disconnect(x_user_id)
