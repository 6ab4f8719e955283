from neo4j import ManagedTransaction
from pydantic import UUID4

from app.models.notification import Notification
from app.models.user import User
from app.repositories.base import NotificationStore, to_native
from app.repositories.user import user_from_node


def notification_from_node(node) -> Notification:
    return Notification(**to_native(dict(node)))


class Neo4jNotificationStore(NotificationStore):
    """Notifications stored as ``:Notification`` nodes linked to their recipient."""

    def create(
        self, tx: ManagedTransaction, notification: Notification
    ) -> Notification:
        query = """
        MATCH (recipient:User {user_id: $recipient_id})
        CREATE (recipient)-[:HAS_NOTIFICATION]->(n:Notification {
            notification_id: $notification_id,
            recipient_id: $recipient_id,
            notification_type: $notification_type,
            actor_id: $actor_id,
            entity_id: $entity_id,
            is_read: $is_read,
            created_at: $created_at
        })
        RETURN n
        """
        result = tx.run(
            query,
            notification_id=str(notification.notification_id),
            recipient_id=str(notification.recipient_id),
            notification_type=notification.notification_type.value,
            actor_id=str(notification.actor_id),
            entity_id=(
                str(notification.entity_id) if notification.entity_id else None
            ),
            is_read=notification.is_read,
            created_at=notification.created_at,
        )
        if record := result.single():
            return notification_from_node(record["n"])
        raise ValueError(f"Recipient {notification.recipient_id} does not exist")

    def list_for(
        self, tx: ManagedTransaction, recipient_id: UUID4, limit: int
    ) -> list[tuple[Notification, User | None]]:
        query = """
        MATCH (:User {user_id: $recipient_id})-[:HAS_NOTIFICATION]->(n:Notification)
        OPTIONAL MATCH (actor:User {user_id: n.actor_id})
        RETURN n, actor
        ORDER BY n.created_at DESC
        LIMIT $limit
        """
        result = tx.run(query, recipient_id=str(recipient_id), limit=limit)
        return [
            (
                notification_from_node(record["n"]),
                user_from_node(record["actor"]) if record["actor"] else None,
            )
            for record in result
        ]

    def unread_count(self, tx: ManagedTransaction, recipient_id: UUID4) -> int:
        query = """
        OPTIONAL MATCH (:User {user_id: $recipient_id})-[:HAS_NOTIFICATION]->(n:Notification {is_read: false})
        RETURN count(n) AS unread
        """
        result = tx.run(query, recipient_id=str(recipient_id))
        record = result.single()
        return record["unread"] if record else 0

    def mark_read(
        self, tx: ManagedTransaction, recipient_id: UUID4, notification_id: UUID4
    ) -> bool:
        query = """
        MATCH (:User {user_id: $recipient_id})-[:HAS_NOTIFICATION]->(n:Notification {notification_id: $notification_id})
        SET n.is_read = true
        RETURN count(n) AS updated
        """
        result = tx.run(
            query,
            recipient_id=str(recipient_id),
            notification_id=str(notification_id),
        )
        record = result.single()
        return bool(record and record["updated"])

    def mark_all_read(self, tx: ManagedTransaction, recipient_id: UUID4) -> int:
        query = """
        OPTIONAL MATCH (:User {user_id: $recipient_id})-[:HAS_NOTIFICATION]->(n:Notification {is_read: false})
        SET n.is_read = true
        RETURN count(n) AS updated
        """
        result = tx.run(query, recipient_id=str(recipient_id))
        record = result.single()
        return record["updated"] if record else 0

    def delete(
        self, tx: ManagedTransaction, recipient_id: UUID4, notification_id: UUID4
    ) -> bool:
        query = """
        MATCH (:User {user_id: $recipient_id})-[:HAS_NOTIFICATION]->(n:Notification {notification_id: $notification_id})
        DETACH DELETE n
        RETURN count(n) AS removed
        """
        result = tx.run(
            query,
            recipient_id=str(recipient_id),
            notification_id=str(notification_id),
        )
        record = result.single()
        return bool(record and record["removed"])

    def delete_all(self, tx: ManagedTransaction, recipient_id: UUID4) -> int:
        query = """
        OPTIONAL MATCH (:User {user_id: $recipient_id})-[:HAS_NOTIFICATION]->(n:Notification)
        DETACH DELETE n
        RETURN count(n) AS removed
        """
        result = tx.run(query, recipient_id=str(recipient_id))
        record = result.single()
        return record["removed"] if record else 0
