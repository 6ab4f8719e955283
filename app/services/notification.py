import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from uuid import uuid4

from neo4j import ManagedTransaction
from pydantic import UUID4

from app.errors import NotificationNotFoundError
from app.models.notification import (
    Notification,
    NotificationFeed,
    NotificationType,
    NotificationView,
)
from app.models.user import User
from app.repositories.base import NotificationStore

logger = logging.getLogger(__name__)

DEFAULT_FEED_LIMIT = 50

MESSAGE_TEMPLATES: dict[NotificationType, str] = {
    NotificationType.LIKE: "{name} liked your profile",
    NotificationType.PROFILE_VIEW: "{name} viewed your profile",
    NotificationType.MATCH: "You matched with {name}!",
    NotificationType.MESSAGE: "{name} sent you a message",
    NotificationType.UNMATCH: "{name} unliked your profile",
}


def render_message(notification_type: NotificationType, actor: User | None) -> str:
    """Human readable text of a notification."""
    template = MESSAGE_TEMPLATES.get(notification_type)
    if template is None or actor is None:
        return "You have a new notification"
    return template.format(name=actor.display_name)


class NotificationSink(ABC):
    """Destination for notifications raised by the dating core.

    Emission is fire-and-forget: implementations must never raise, so that a
    failed notification cannot fail or roll back the operation that caused it.
    """

    @abstractmethod
    def emit(
        self,
        recipient_id: UUID4,
        notification_type: NotificationType,
        actor_id: UUID4,
        entity_id: UUID4 | None = None,
    ) -> Notification | None:
        """Deliver a notification.

        Args:
            recipient_id: ID of the user to notify
            notification_type: What happened
            actor_id: ID of the user who caused it
            entity_id: ID of a related record, such as a message

        Returns:
            The delivered notification, or None if delivery failed
        """
        raise NotImplementedError


class NotificationService(NotificationSink):
    """Notification sink that persists notifications for the recipient's feed.

    Besides emitting, it serves the recipient's side: listing the feed and
    marking or deleting entries.
    """

    def __init__(self, database, notifications: NotificationStore) -> None:
        self.database = database
        self.notifications = notifications

    def _create_notification(
        self, tx: ManagedTransaction, notification: Notification
    ) -> Notification:
        return self.notifications.create(tx, notification)

    def emit(
        self,
        recipient_id: UUID4,
        notification_type: NotificationType,
        actor_id: UUID4,
        entity_id: UUID4 | None = None,
    ) -> Notification | None:
        notification = Notification(
            notification_id=uuid4(),
            recipient_id=recipient_id,
            notification_type=notification_type,
            actor_id=actor_id,
            entity_id=entity_id,
            created_at=datetime.now(UTC),
        )
        try:
            return self.database.execute_write(
                self._create_notification, notification=notification
            )
        except Exception:
            logger.exception(
                "Failed to emit %s notification to user %s",
                notification_type.value,
                recipient_id,
            )
            return None

    def _list_notifications(
        self, tx: ManagedTransaction, user_id: UUID4, limit: int
    ) -> NotificationFeed:
        entries = self.notifications.list_for(tx, user_id, limit)
        return NotificationFeed(
            notifications=[
                NotificationView(
                    notification=notification,
                    actor_username=actor.username if actor else None,
                    actor_name=actor.display_name if actor else None,
                    message=render_message(notification.notification_type, actor),
                )
                for notification, actor in entries
            ],
            unread_count=self.notifications.unread_count(tx, user_id),
        )

    async def list_notifications(
        self, user_id: UUID4, limit: int = DEFAULT_FEED_LIMIT
    ) -> NotificationFeed:
        """Get the newest notifications of a user.

        Args:
            user_id: ID of the recipient
            limit: Maximum number of notifications to return

        Returns:
            Notifications newest first, with the total unread count
        """
        return self.database.execute_read(self._list_notifications, user_id, limit)

    async def mark_as_read(self, user_id: UUID4, notification_id: UUID4) -> None:
        """Mark one notification as read.

        Raises:
            NotificationNotFoundError: If the user has no such notification
        """
        updated = self.database.execute_write(
            self.notifications.mark_read, user_id, notification_id
        )
        if not updated:
            raise NotificationNotFoundError(
                f"Notification {notification_id} not found"
            )

    async def mark_all_as_read(self, user_id: UUID4) -> int:
        return self.database.execute_write(self.notifications.mark_all_read, user_id)

    async def delete(self, user_id: UUID4, notification_id: UUID4) -> None:
        """Delete one notification.

        Raises:
            NotificationNotFoundError: If the user has no such notification
        """
        removed = self.database.execute_write(
            self.notifications.delete, user_id, notification_id
        )
        if not removed:
            raise NotificationNotFoundError(
                f"Notification {notification_id} not found"
            )

    async def delete_all(self, user_id: UUID4) -> int:
        return self.database.execute_write(self.notifications.delete_all, user_id)
