from datetime import datetime

from pydantic import UUID4, BaseModel, ConfigDict, Field


class Message(BaseModel):
    """Model representing a chat message between two matched users.

    Attributes:
        message_id: Unique identifier for the message
        match_id: ID of the match the conversation belongs to
        sender_id: ID of the user sending the message
        receiver_id: ID of the user receiving the message
        content: The text content of the message
        is_read: Whether the receiver has read the message
        created_at: When the message was created
    """

    model_config = ConfigDict(frozen=True)

    message_id: UUID4
    match_id: UUID4
    sender_id: UUID4
    receiver_id: UUID4
    content: str = Field(min_length=1, max_length=5000)
    is_read: bool = False
    created_at: datetime


class Conversation(BaseModel):
    """Summary of the chat attached to one match.

    Attributes:
        match_id: ID of the match
        other_user_id: The other participant
        matched_at: When the match was created
        last_message_at: When the last message was sent, if any
        unread_count: Messages addressed to the viewer not yet read
    """

    model_config = ConfigDict(frozen=True)

    match_id: UUID4
    other_user_id: UUID4
    matched_at: datetime
    last_message_at: datetime | None = None
    unread_count: int = Field(0, ge=0)
