"""Storage contracts of the dating core.

Each store works inside a transaction opened by the caller: every method
takes the open transaction as its first argument, so one service call can
touch several stores and still commit atomically.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from pydantic import UUID4

from app.models.block import Block, Report
from app.models.browse import CandidateQuery, CandidateRecord
from app.models.like import Like
from app.models.match import Match
from app.models.message import Message
from app.models.notification import Notification
from app.models.photo import Photo
from app.models.profile import Profile, ProfileCounter
from app.models.tag import Tag
from app.models.user import User


def to_native(data: dict[str, Any]) -> dict[str, Any]:
    """Convert Neo4j temporal values in a record map to Python ones."""
    return {
        key: value.to_native() if hasattr(value, "to_native") else value
        for key, value in data.items()
    }


class UserStore(ABC):
    @abstractmethod
    def get_user(self, tx: Any, user_id: UUID4) -> User | None:
        raise NotImplementedError

    @abstractmethod
    def user_exists(self, tx: Any, user_id: UUID4) -> bool:
        raise NotImplementedError

    @abstractmethod
    def set_presence(
        self, tx: Any, user_id: UUID4, is_online: bool, last_login: datetime | None
    ) -> None:
        """Update the online flag, and the last-login time when one is given."""
        raise NotImplementedError


class ProfileStore(ABC):
    """Owns profile records and their counters."""

    @abstractmethod
    def get_profile(self, tx: Any, user_id: UUID4) -> Profile | None:
        raise NotImplementedError

    @abstractmethod
    def upsert_profile(
        self, tx: Any, user_id: UUID4, fields: dict[str, Any]
    ) -> Profile:
        """Create the profile if needed and set the given fields.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        raise NotImplementedError

    @abstractmethod
    def increment_counter(
        self, tx: Any, user_id: UUID4, counter: ProfileCounter, delta: int
    ) -> None:
        """Add ``delta`` to a counter, never letting it drop below zero.

        Users without a profile are left untouched.
        """
        raise NotImplementedError

    @abstractmethod
    def set_fame_rating(self, tx: Any, user_id: UUID4, value: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_candidate(self, tx: Any, user_id: UUID4) -> CandidateRecord | None:
        raise NotImplementedError

    @abstractmethod
    def find_candidates(
        self, tx: Any, query: CandidateQuery
    ) -> list[CandidateRecord]:
        """Return every profile accepted by ``query.matches``."""
        raise NotImplementedError


class TagIndex(ABC):
    """Owns interest tags and which users hold them."""

    @abstractmethod
    def get_tag_ids(self, tx: Any, user_id: UUID4) -> set[UUID4]:
        raise NotImplementedError

    @abstractmethod
    def get_tags(self, tx: Any, user_id: UUID4) -> list[Tag]:
        raise NotImplementedError

    @abstractmethod
    def get_tag_by_name(self, tx: Any, name: str) -> Tag | None:
        raise NotImplementedError

    def tag_exists(self, tx: Any, name: str) -> bool:
        return self.get_tag_by_name(tx, name) is not None

    @abstractmethod
    def create_tag(self, tx: Any, name: str) -> Tag:
        raise NotImplementedError

    @abstractmethod
    def attach_tag(self, tx: Any, user_id: UUID4, tag_id: UUID4) -> bool:
        """Attach a tag to a user. Returns False if it was already attached."""
        raise NotImplementedError

    @abstractmethod
    def detach_tag(self, tx: Any, user_id: UUID4, tag_id: UUID4) -> bool:
        """Detach a tag from a user. Returns False if it was not attached."""
        raise NotImplementedError


class InteractionLedger(ABC):
    """Owns like, match, block and report records between users."""

    @abstractmethod
    def lock_pair(self, tx: Any, user_a: UUID4, user_b: UUID4) -> None:
        """Take write locks on both users, smaller id first.

        Transactions touching the likes or match between the same two users
        are serialised by this lock, whichever direction they work in.
        """
        raise NotImplementedError

    @abstractmethod
    def create_like(self, tx: Any, liker_id: UUID4, liked_id: UUID4) -> Like:
        """Create a directed like.

        Raises:
            DuplicateLikeError: If the like already exists
        """
        raise NotImplementedError

    @abstractmethod
    def delete_like(self, tx: Any, liker_id: UUID4, liked_id: UUID4) -> bool:
        """Delete a directed like. Returns False if there was none."""
        raise NotImplementedError

    @abstractmethod
    def like_exists(self, tx: Any, liker_id: UUID4, liked_id: UUID4) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_liked_ids(self, tx: Any, liker_id: UUID4) -> set[UUID4]:
        raise NotImplementedError

    @abstractmethod
    def list_likes_given(self, tx: Any, user_id: UUID4) -> list[Like]:
        raise NotImplementedError

    @abstractmethod
    def list_likes_received(self, tx: Any, user_id: UUID4) -> list[Like]:
        raise NotImplementedError

    @abstractmethod
    def find_match(self, tx: Any, user_a: UUID4, user_b: UUID4) -> Match | None:
        raise NotImplementedError

    @abstractmethod
    def get_match(self, tx: Any, match_id: UUID4) -> Match | None:
        raise NotImplementedError

    @abstractmethod
    def create_match(self, tx: Any, user_a: UUID4, user_b: UUID4) -> Match:
        """Create the match for a pair, stored in canonical order.

        Raises:
            ConflictError: If the pair is already matched
        """
        raise NotImplementedError

    @abstractmethod
    def delete_match(self, tx: Any, match_id: UUID4) -> bool:
        raise NotImplementedError

    @abstractmethod
    def list_matches(self, tx: Any, user_id: UUID4) -> list[Match]:
        raise NotImplementedError

    @abstractmethod
    def is_blocked(self, tx: Any, user_a: UUID4, user_b: UUID4) -> bool:
        """Whether either user blocks the other."""
        raise NotImplementedError

    @abstractmethod
    def block_exists(self, tx: Any, blocker_id: UUID4, blocked_id: UUID4) -> bool:
        raise NotImplementedError

    @abstractmethod
    def create_block(self, tx: Any, blocker_id: UUID4, blocked_id: UUID4) -> Block:
        """Create a directed block.

        Raises:
            AlreadyBlockedError: If the block already exists
        """
        raise NotImplementedError

    @abstractmethod
    def delete_block(self, tx: Any, blocker_id: UUID4, blocked_id: UUID4) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_block_partner_ids(self, tx: Any, user_id: UUID4) -> set[UUID4]:
        """Users blocking or blocked by ``user_id``."""
        raise NotImplementedError

    @abstractmethod
    def list_blocks(self, tx: Any, blocker_id: UUID4) -> list[Block]:
        raise NotImplementedError

    @abstractmethod
    def create_report(
        self, tx: Any, reporter_id: UUID4, reported_id: UUID4, reason: str
    ) -> Report:
        """Create a report.

        Raises:
            AlreadyReportedError: If the reporter already reported this user
        """
        raise NotImplementedError


class PhotoStore(ABC):
    @abstractmethod
    def list_photos(self, tx: Any, user_id: UUID4) -> list[Photo]:
        """Photos of a user, oldest first."""
        raise NotImplementedError

    @abstractmethod
    def count_photos(self, tx: Any, user_id: UUID4) -> int:
        raise NotImplementedError

    @abstractmethod
    def has_profile_photo(self, tx: Any, user_id: UUID4) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_photo(self, tx: Any, user_id: UUID4, photo_id: UUID4) -> Photo | None:
        """A photo, only if it belongs to ``user_id``."""
        raise NotImplementedError

    @abstractmethod
    def create_photo(
        self, tx: Any, user_id: UUID4, file_path: str, is_profile: bool
    ) -> Photo:
        raise NotImplementedError

    @abstractmethod
    def set_profile_photo(self, tx: Any, user_id: UUID4, photo_id: UUID4) -> Photo:
        """Flag one photo as the profile picture and clear the others."""
        raise NotImplementedError

    @abstractmethod
    def delete_photo(self, tx: Any, user_id: UUID4, photo_id: UUID4) -> bool:
        raise NotImplementedError


class NotificationStore(ABC):
    @abstractmethod
    def create(self, tx: Any, notification: Notification) -> Notification:
        raise NotImplementedError

    @abstractmethod
    def list_for(
        self, tx: Any, recipient_id: UUID4, limit: int
    ) -> list[tuple[Notification, User | None]]:
        """Newest notifications of a recipient, each with its actor."""
        raise NotImplementedError

    @abstractmethod
    def unread_count(self, tx: Any, recipient_id: UUID4) -> int:
        raise NotImplementedError

    @abstractmethod
    def mark_read(self, tx: Any, recipient_id: UUID4, notification_id: UUID4) -> bool:
        raise NotImplementedError

    @abstractmethod
    def mark_all_read(self, tx: Any, recipient_id: UUID4) -> int:
        raise NotImplementedError

    @abstractmethod
    def delete(self, tx: Any, recipient_id: UUID4, notification_id: UUID4) -> bool:
        raise NotImplementedError

    @abstractmethod
    def delete_all(self, tx: Any, recipient_id: UUID4) -> int:
        raise NotImplementedError


class MessageStore(ABC):
    @abstractmethod
    def create(self, tx: Any, message: Message) -> Message:
        raise NotImplementedError

    @abstractmethod
    def get(self, tx: Any, message_id: UUID4) -> Message | None:
        raise NotImplementedError

    @abstractmethod
    def list_for_match(self, tx: Any, match_id: UUID4) -> list[Message]:
        """Messages of a match, oldest first."""
        raise NotImplementedError

    @abstractmethod
    def mark_read(self, tx: Any, match_id: UUID4, receiver_id: UUID4) -> int:
        raise NotImplementedError

    @abstractmethod
    def delete(self, tx: Any, message_id: UUID4) -> bool:
        raise NotImplementedError

    @abstractmethod
    def delete_for_match(self, tx: Any, match_id: UUID4) -> int:
        raise NotImplementedError
