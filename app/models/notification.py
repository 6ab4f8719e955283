from datetime import datetime
from enum import Enum

from pydantic import UUID4, BaseModel, ConfigDict, Field


class NotificationType(str, Enum):
    """Types of notifications that can be sent in the system.

    Attributes:
        LIKE: Someone liked the recipient's profile
        PROFILE_VIEW: Someone viewed the recipient's profile
        MATCH: The recipient matched with someone
        MESSAGE: The recipient received a chat message
        UNMATCH: Someone removed their like and the match ended
    """

    LIKE = "like"
    PROFILE_VIEW = "profile_view"
    MATCH = "match"
    MESSAGE = "message"
    UNMATCH = "unmatch"


class Notification(BaseModel):
    """Model representing a notification in the system.

    Attributes:
        notification_id: Unique identifier for the notification
        recipient_id: ID of the user receiving the notification
        notification_type: Type of notification
        actor_id: ID of the user who triggered the notification
        entity_id: ID of a related record such as a message, if any
        is_read: Whether the recipient has read the notification
        created_at: When the notification was created
    """

    model_config = ConfigDict(frozen=True)

    notification_id: UUID4 = Field(description="Unique identifier for the notification")
    recipient_id: UUID4 = Field(description="ID of the user receiving the notification")
    notification_type: NotificationType = Field(description="Type of notification")
    actor_id: UUID4 = Field(description="ID of the user who triggered the notification")
    entity_id: UUID4 | None = Field(None, description="ID of the related record")
    is_read: bool = Field(False, description="Whether the notification was read")
    created_at: datetime = Field(description="When the notification was created")


class NotificationView(BaseModel):
    """Notification enriched with the actor's name and a display message."""

    model_config = ConfigDict(frozen=True)

    notification: Notification
    actor_username: str | None = None
    actor_name: str | None = None
    message: str


class NotificationFeed(BaseModel):
    """A page of notifications plus the recipient's unread count."""

    model_config = ConfigDict(frozen=True)

    notifications: list[NotificationView]
    unread_count: int = Field(ge=0)
