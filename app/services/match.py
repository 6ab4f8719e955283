import logging

from neo4j import ManagedTransaction
from pydantic import UUID4

from app.errors import (
    BlockedInteractionError,
    DuplicateLikeError,
    LikeNotFoundError,
    NoProfilePictureError,
    SelfLikeError,
    TargetNotFoundError,
)
from app.models.like import Like
from app.models.match import Match, MatchStatus
from app.models.notification import NotificationType
from app.models.profile import ProfileCounter
from app.repositories.base import (
    InteractionLedger,
    MessageStore,
    PhotoStore,
    ProfileStore,
    UserStore,
)
from app.schemas.database_records import LikeRecord, UnlikeRecord
from app.services.fame import FameRatingUpdater
from app.services.notification import NotificationSink

logger = logging.getLogger(__name__)


class MatchEngine:
    """Like/unlike state machine between pairs of users.

    For a pair A, B the states are: no likes, A likes B, B likes A, and
    matched. A like that completes a mutual pair creates the match in the same
    transaction; removing either like ends the match. Notifications and fame
    rating refreshes happen after the transaction commits.
    """

    def __init__(
        self,
        database,
        users: UserStore,
        profiles: ProfileStore,
        ledger: InteractionLedger,
        photos: PhotoStore,
        messages: MessageStore,
        sink: NotificationSink,
        fame: FameRatingUpdater,
    ) -> None:
        self.database = database
        self.users = users
        self.profiles = profiles
        self.ledger = ledger
        self.photos = photos
        self.messages = messages
        self.sink = sink
        self.fame = fame

    def _create_like(
        self, tx: ManagedTransaction, liker_id: UUID4, liked_id: UUID4
    ) -> tuple[LikeRecord, bool]:
        self.ledger.lock_pair(tx, liker_id, liked_id)
        if not self.users.user_exists(tx, liked_id):
            raise TargetNotFoundError(f"User {liked_id} not found")
        if not self.photos.has_profile_photo(tx, liker_id):
            raise NoProfilePictureError("Set a profile picture before liking users")
        if self.ledger.is_blocked(tx, liker_id, liked_id):
            raise BlockedInteractionError("Cannot like a user separated by a block")
        if self.ledger.like_exists(tx, liker_id, liked_id):
            raise DuplicateLikeError(f"User {liker_id} already likes {liked_id}")

        like = self.ledger.create_like(tx, liker_id, liked_id)
        self.profiles.increment_counter(tx, liked_id, ProfileCounter.LIKES, 1)

        if not self.ledger.like_exists(tx, liked_id, liker_id):
            return LikeRecord(success=True, like=like, is_match=False), False

        match = self.ledger.find_match(tx, liker_id, liked_id)
        created = match is None
        if created:
            match = self.ledger.create_match(tx, liker_id, liked_id)
            self.profiles.increment_counter(tx, liker_id, ProfileCounter.MATCHES, 1)
            self.profiles.increment_counter(tx, liked_id, ProfileCounter.MATCHES, 1)
        record = LikeRecord(
            success=True, like=like, is_match=True, match_id=match.match_id
        )
        return record, created

    async def like_user(self, liker_id: UUID4, liked_id: UUID4) -> LikeRecord:
        """Like another user, creating a match if the like is mutual.

        Args:
            liker_id: ID of the user giving the like
            liked_id: ID of the user being liked

        Returns:
            The created like, and the match if one now exists

        Raises:
            SelfLikeError: If a user tries to like themselves
            TargetNotFoundError: If the liked user does not exist
            NoProfilePictureError: If the liker has no profile picture
            BlockedInteractionError: If either user blocks the other
            DuplicateLikeError: If the like already exists
        """
        if liker_id == liked_id:
            raise SelfLikeError("Users cannot like themselves")

        record, created_match = self.database.execute_write(
            self._create_like, liker_id, liked_id
        )

        if created_match:
            logger.info("Users %s and %s matched", liker_id, liked_id)
            self.sink.emit(liked_id, NotificationType.MATCH, liker_id)
            self.sink.emit(liker_id, NotificationType.MATCH, liked_id)
        else:
            self.sink.emit(liked_id, NotificationType.LIKE, liker_id)
        self.fame.refresh_many(liked_id, liker_id)
        return record

    def _remove_like(
        self, tx: ManagedTransaction, liker_id: UUID4, liked_id: UUID4
    ) -> UnlikeRecord:
        self.ledger.lock_pair(tx, liker_id, liked_id)
        if not self.ledger.delete_like(tx, liker_id, liked_id):
            raise LikeNotFoundError(f"User {liker_id} does not like {liked_id}")
        self.profiles.increment_counter(tx, liked_id, ProfileCounter.LIKES, -1)

        match = self.ledger.find_match(tx, liker_id, liked_id)
        if match is None:
            return UnlikeRecord(success=True, was_match=False)

        self.messages.delete_for_match(tx, match.match_id)
        self.ledger.delete_match(tx, match.match_id)
        self.profiles.increment_counter(tx, liker_id, ProfileCounter.MATCHES, -1)
        self.profiles.increment_counter(tx, liked_id, ProfileCounter.MATCHES, -1)
        return UnlikeRecord(success=True, was_match=True, match_id=match.match_id)

    async def unlike_user(self, liker_id: UUID4, liked_id: UUID4) -> UnlikeRecord:
        """Remove a like, ending the match it was part of.

        Args:
            liker_id: ID of the user who gave the like
            liked_id: ID of the user who received it

        Returns:
            Whether a match was ended, and which

        Raises:
            LikeNotFoundError: If the like does not exist
        """
        record = self.database.execute_write(self._remove_like, liker_id, liked_id)

        if record.was_match:
            logger.info("Users %s and %s unmatched", liker_id, liked_id)
            self.sink.emit(
                liked_id, NotificationType.UNMATCH, liker_id, record.match_id
            )
        self.fame.refresh_many(liked_id, liker_id)
        return record

    def _check_match(
        self, tx: ManagedTransaction, user_id: UUID4, other_id: UUID4
    ) -> MatchStatus:
        match = self.ledger.find_match(tx, user_id, other_id)
        return MatchStatus(
            is_match=match is not None, match_id=match.match_id if match else None
        )

    async def check_match(self, user_id: UUID4, other_id: UUID4) -> MatchStatus:
        return self.database.execute_read(self._check_match, user_id, other_id)

    async def get_matches(self, user_id: UUID4) -> list[Match]:
        """Get the current matches of a user, newest first."""
        return self.database.execute_read(self.ledger.list_matches, user_id)

    async def get_likes_given(self, user_id: UUID4) -> list[Like]:
        return self.database.execute_read(self.ledger.list_likes_given, user_id)

    async def get_likes_received(self, user_id: UUID4) -> list[Like]:
        return self.database.execute_read(self.ledger.list_likes_received, user_id)
