from neo4j import ManagedTransaction
from pydantic import UUID4

from app.models.message import Message
from app.repositories.base import MessageStore, to_native


class Neo4jMessageStore(MessageStore):
    """Chat messages stored as ``:Message`` nodes keyed by their match."""

    def create(self, tx: ManagedTransaction, message: Message) -> Message:
        query = """
        MATCH (sender:User {user_id: $sender_id})
        MATCH (receiver:User {user_id: $receiver_id})
        CREATE (sender)-[:SENT]->(message:Message {
            message_id: $message_id,
            match_id: $match_id,
            sender_id: $sender_id,
            receiver_id: $receiver_id,
            content: $content,
            is_read: false,
            created_at: $created_at
        })-[:SENT_TO]->(receiver)
        RETURN message
        """
        result = tx.run(
            query,
            message_id=str(message.message_id),
            match_id=str(message.match_id),
            sender_id=str(message.sender_id),
            receiver_id=str(message.receiver_id),
            content=message.content,
            created_at=message.created_at,
        )
        record = result.single(strict=True)
        return Message(**to_native(dict(record["message"])))

    def get(self, tx: ManagedTransaction, message_id: UUID4) -> Message | None:
        query = """
        MATCH (message:Message {message_id: $message_id})
        RETURN message
        """
        result = tx.run(query, message_id=str(message_id))
        if record := result.single():
            return Message(**to_native(dict(record["message"])))
        return None

    def list_for_match(
        self, tx: ManagedTransaction, match_id: UUID4
    ) -> list[Message]:
        query = """
        MATCH (message:Message {match_id: $match_id})
        RETURN message
        ORDER BY message.created_at
        """
        result = tx.run(query, match_id=str(match_id))
        return [Message(**to_native(dict(record["message"]))) for record in result]

    def mark_read(
        self, tx: ManagedTransaction, match_id: UUID4, receiver_id: UUID4
    ) -> int:
        query = """
        OPTIONAL MATCH (message:Message {
            match_id: $match_id,
            receiver_id: $receiver_id,
            is_read: false
        })
        SET message.is_read = true
        RETURN count(message) AS updated
        """
        result = tx.run(query, match_id=str(match_id), receiver_id=str(receiver_id))
        record = result.single()
        return record["updated"] if record else 0

    def delete(self, tx: ManagedTransaction, message_id: UUID4) -> bool:
        query = """
        MATCH (message:Message {message_id: $message_id})
        DETACH DELETE message
        RETURN count(message) AS removed
        """
        result = tx.run(query, message_id=str(message_id))
        record = result.single()
        return bool(record and record["removed"])

    def delete_for_match(self, tx: ManagedTransaction, match_id: UUID4) -> int:
        query = """
        OPTIONAL MATCH (message:Message {match_id: $match_id})
        DETACH DELETE message
        RETURN count(message) AS removed
        """
        result = tx.run(query, match_id=str(match_id))
        record = result.single()
        return record["removed"] if record else 0
