import logging
from datetime import UTC, datetime
from uuid import uuid4

from neo4j import ManagedTransaction
from pydantic import UUID4

from app.errors import EmptyMessageError, MatchNotFoundError, MessageNotFoundError
from app.models.match import Match
from app.models.message import Conversation, Message
from app.models.notification import NotificationType
from app.repositories.base import InteractionLedger, MessageStore
from app.services.notification import NotificationSink

logger = logging.getLogger(__name__)


class ChatService:
    """Messages exchanged between two matched users.

    Every conversation belongs to a match; ending the match deletes it.
    Delivery to connected clients is left to the transport layer.
    """

    def __init__(
        self,
        database,
        ledger: InteractionLedger,
        messages: MessageStore,
        sink: NotificationSink,
    ) -> None:
        self.database = database
        self.ledger = ledger
        self.messages = messages
        self.sink = sink

    def _get_own_match(
        self, tx: ManagedTransaction, user_id: UUID4, match_id: UUID4
    ) -> Match:
        match = self.ledger.get_match(tx, match_id)
        if match is None or not match.involves(user_id):
            raise MatchNotFoundError(f"Match {match_id} not found")
        return match

    def _send_message(
        self, tx: ManagedTransaction, sender_id: UUID4, match_id: UUID4, content: str
    ) -> Message:
        match = self._get_own_match(tx, sender_id, match_id)
        message = Message(
            message_id=uuid4(),
            match_id=match.match_id,
            sender_id=sender_id,
            receiver_id=match.other_party(sender_id),
            content=content,
            created_at=datetime.now(UTC),
        )
        return self.messages.create(tx, message)

    async def send_message(
        self, sender_id: UUID4, match_id: UUID4, content: str
    ) -> Message:
        """Send a message within a match.

        Args:
            sender_id: ID of the sending user
            match_id: ID of the match the conversation belongs to
            content: Message text, surrounding whitespace is dropped

        Returns:
            The stored message

        Raises:
            EmptyMessageError: If the content is blank
            MatchNotFoundError: If the match does not exist or the sender is not in it
        """
        content = content.strip()
        if not content:
            raise EmptyMessageError("Message content cannot be empty")

        message = self.database.execute_write(
            self._send_message, sender_id, match_id, content
        )
        self.sink.emit(
            message.receiver_id,
            NotificationType.MESSAGE,
            sender_id,
            message.message_id,
        )
        return message

    def _get_messages(
        self, tx: ManagedTransaction, user_id: UUID4, match_id: UUID4
    ) -> list[Message]:
        self._get_own_match(tx, user_id, match_id)
        messages = self.messages.list_for_match(tx, match_id)
        self.messages.mark_read(tx, match_id, user_id)
        return messages

    async def get_messages(self, user_id: UUID4, match_id: UUID4) -> list[Message]:
        """Get the messages of a match, oldest first.

        Messages addressed to the user are marked as read. The returned list
        shows their state from before this call.

        Raises:
            MatchNotFoundError: If the match does not exist or the user is not in it
        """
        return self.database.execute_write(self._get_messages, user_id, match_id)

    def _delete_message(
        self, tx: ManagedTransaction, user_id: UUID4, message_id: UUID4
    ) -> None:
        message = self.messages.get(tx, message_id)
        if message is None or message.sender_id != user_id:
            raise MessageNotFoundError(f"Message {message_id} not found")
        self.messages.delete(tx, message_id)

    async def delete_message(self, user_id: UUID4, message_id: UUID4) -> None:
        """Delete a message. Only its sender may delete it.

        Raises:
            MessageNotFoundError: If the message does not exist or was sent by someone else
        """
        self.database.execute_write(self._delete_message, user_id, message_id)

    def _get_conversations(
        self, tx: ManagedTransaction, user_id: UUID4
    ) -> list[Conversation]:
        conversations = []
        for match in self.ledger.list_matches(tx, user_id):
            messages = self.messages.list_for_match(tx, match.match_id)
            conversations.append(
                Conversation(
                    match_id=match.match_id,
                    other_user_id=match.other_party(user_id),
                    matched_at=match.created_at,
                    last_message_at=messages[-1].created_at if messages else None,
                    unread_count=sum(
                        1
                        for message in messages
                        if message.receiver_id == user_id and not message.is_read
                    ),
                )
            )
        conversations.sort(
            key=lambda c: c.last_message_at or c.matched_at, reverse=True
        )
        return conversations

    async def get_conversations(self, user_id: UUID4) -> list[Conversation]:
        """Get one conversation per match, most recent activity first."""
        return self.database.execute_read(self._get_conversations, user_id)
