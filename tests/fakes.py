"""In-memory stand-ins for the Neo4j stores and database manager.

The fakes honour the same uniqueness rules as the database constraints, and
``FakeDatabase.execute_write`` rolls every change back when the transaction
function raises, like a managed transaction does.
"""

import copy
from datetime import UTC, date, datetime, timedelta
from typing import Any, Callable
from uuid import uuid4

from pydantic import UUID4

from app.errors import (
    AlreadyBlockedError,
    AlreadyReportedError,
    ConflictError,
    DuplicateLikeError,
    PhotoNotFoundError,
    UserNotFoundError,
)
from app.models.block import Block, Report
from app.models.browse import CandidateQuery, CandidateRecord
from app.models.like import Like
from app.models.match import Match, canonical_pair
from app.models.message import Message
from app.models.notification import Notification, NotificationType
from app.models.photo import Photo
from app.models.profile import Profile, ProfileCounter
from app.models.tag import Tag
from app.models.user import User
from app.repositories.base import (
    InteractionLedger,
    MessageStore,
    NotificationStore,
    PhotoStore,
    ProfileStore,
    TagIndex,
    UserStore,
)
from app.services.notification import NotificationSink


class InMemoryState:
    """Everything the fake stores hold. Passed to them as the transaction."""

    def __init__(self) -> None:
        self.users: dict[UUID4, User] = {}
        self.profiles: dict[UUID4, Profile] = {}
        self.tags: dict[UUID4, Tag] = {}
        self.user_tags: set[tuple[UUID4, UUID4]] = set()
        self.likes: dict[tuple[UUID4, UUID4], Like] = {}
        self.matches: dict[UUID4, Match] = {}
        self.blocks: dict[tuple[UUID4, UUID4], Block] = {}
        self.reports: dict[tuple[UUID4, UUID4], Report] = {}
        self.photos: dict[UUID4, Photo] = {}
        self.notifications: dict[UUID4, Notification] = {}
        self.messages: dict[UUID4, Message] = {}


class FakeDatabase:
    def __init__(self) -> None:
        self.state = InMemoryState()
        self.writes = 0

    def execute_read(self, work: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return work(self.state, *args, **kwargs)

    def execute_write(self, work: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        snapshot = copy.deepcopy(self.state)
        try:
            result = work(self.state, *args, **kwargs)
        except Exception:
            self.state.__dict__.update(snapshot.__dict__)
            raise
        self.writes += 1
        return result


class FakeUserStore(UserStore):
    def get_user(self, tx: InMemoryState, user_id: UUID4) -> User | None:
        return tx.users.get(user_id)

    def user_exists(self, tx: InMemoryState, user_id: UUID4) -> bool:
        return user_id in tx.users

    def set_presence(
        self,
        tx: InMemoryState,
        user_id: UUID4,
        is_online: bool,
        last_login: datetime | None,
    ) -> None:
        if user := tx.users.get(user_id):
            update: dict[str, Any] = {"is_online": is_online}
            if last_login is not None:
                update["last_login"] = last_login
            tx.users[user_id] = user.model_copy(update=update)


def _photos_of(tx: InMemoryState, user_id: UUID4) -> list[Photo]:
    return [photo for photo in tx.photos.values() if photo.user_id == user_id]


def _tags_of(tx: InMemoryState, user_id: UUID4) -> list[Tag]:
    tags = [tx.tags[tag_id] for owner, tag_id in tx.user_tags if owner == user_id]
    return sorted(tags, key=lambda tag: tag.name)


class FakeProfileStore(ProfileStore):
    def get_profile(self, tx: InMemoryState, user_id: UUID4) -> Profile | None:
        return tx.profiles.get(user_id)

    def upsert_profile(
        self, tx: InMemoryState, user_id: UUID4, fields: dict[str, Any]
    ) -> Profile:
        if user_id not in tx.users:
            raise UserNotFoundError(f"User {user_id} not found")
        now = datetime.now(UTC)
        profile = tx.profiles.get(user_id) or Profile(user_id=user_id, created_at=now)
        profile = Profile(**{**profile.model_dump(), **fields, "updated_at": now})
        tx.profiles[user_id] = profile
        return profile

    def increment_counter(
        self, tx: InMemoryState, user_id: UUID4, counter: ProfileCounter, delta: int
    ) -> None:
        if profile := tx.profiles.get(user_id):
            value = max(0, getattr(profile, counter.value) + delta)
            tx.profiles[user_id] = profile.model_copy(update={counter.value: value})

    def set_fame_rating(self, tx: InMemoryState, user_id: UUID4, value: float) -> None:
        if profile := tx.profiles.get(user_id):
            tx.profiles[user_id] = profile.model_copy(update={"fame_rating": value})

    def get_candidate(
        self, tx: InMemoryState, user_id: UUID4
    ) -> CandidateRecord | None:
        profile = tx.profiles.get(user_id)
        if profile is None or user_id not in tx.users:
            return None
        return CandidateRecord(
            user=tx.users[user_id],
            profile=profile,
            tags=_tags_of(tx, user_id),
            photos=_photos_of(tx, user_id),
        )

    def find_candidates(
        self, tx: InMemoryState, query: CandidateQuery
    ) -> list[CandidateRecord]:
        records = (self.get_candidate(tx, user_id) for user_id in tx.profiles)
        return [record for record in records if record and query.matches(record)]


class FakeTagIndex(TagIndex):
    def get_tag_ids(self, tx: InMemoryState, user_id: UUID4) -> set[UUID4]:
        return {tag_id for owner, tag_id in tx.user_tags if owner == user_id}

    def get_tags(self, tx: InMemoryState, user_id: UUID4) -> list[Tag]:
        return _tags_of(tx, user_id)

    def get_tag_by_name(self, tx: InMemoryState, name: str) -> Tag | None:
        return next((tag for tag in tx.tags.values() if tag.name == name), None)

    def create_tag(self, tx: InMemoryState, name: str) -> Tag:
        if tag := self.get_tag_by_name(tx, name):
            return tag
        tag = Tag(tag_id=uuid4(), name=name)
        tx.tags[tag.tag_id] = tag
        return tag

    def attach_tag(self, tx: InMemoryState, user_id: UUID4, tag_id: UUID4) -> bool:
        if (user_id, tag_id) in tx.user_tags:
            return False
        tx.user_tags.add((user_id, tag_id))
        return True

    def detach_tag(self, tx: InMemoryState, user_id: UUID4, tag_id: UUID4) -> bool:
        if (user_id, tag_id) not in tx.user_tags:
            return False
        tx.user_tags.remove((user_id, tag_id))
        return True


class FakeInteractionLedger(InteractionLedger):
    def lock_pair(self, tx: InMemoryState, user_a: UUID4, user_b: UUID4) -> None:
        # Fake transactions run one at a time
        return None

    def create_like(self, tx: InMemoryState, liker_id: UUID4, liked_id: UUID4) -> Like:
        if (liker_id, liked_id) in tx.likes:
            raise DuplicateLikeError(f"User {liker_id} already likes {liked_id}")
        like = Like(liker_id=liker_id, liked_id=liked_id, created_at=datetime.now(UTC))
        tx.likes[(liker_id, liked_id)] = like
        return like

    def delete_like(self, tx: InMemoryState, liker_id: UUID4, liked_id: UUID4) -> bool:
        return tx.likes.pop((liker_id, liked_id), None) is not None

    def like_exists(self, tx: InMemoryState, liker_id: UUID4, liked_id: UUID4) -> bool:
        return (liker_id, liked_id) in tx.likes

    def get_liked_ids(self, tx: InMemoryState, liker_id: UUID4) -> set[UUID4]:
        return {liked for liker, liked in tx.likes if liker == liker_id}

    def list_likes_given(self, tx: InMemoryState, user_id: UUID4) -> list[Like]:
        return [like for like in tx.likes.values() if like.liker_id == user_id]

    def list_likes_received(self, tx: InMemoryState, user_id: UUID4) -> list[Like]:
        return [like for like in tx.likes.values() if like.liked_id == user_id]

    def find_match(
        self, tx: InMemoryState, user_a: UUID4, user_b: UUID4
    ) -> Match | None:
        user1_id, user2_id = canonical_pair(user_a, user_b)
        return next(
            (
                match
                for match in tx.matches.values()
                if (match.user1_id, match.user2_id) == (user1_id, user2_id)
            ),
            None,
        )

    def get_match(self, tx: InMemoryState, match_id: UUID4) -> Match | None:
        return tx.matches.get(match_id)

    def create_match(self, tx: InMemoryState, user_a: UUID4, user_b: UUID4) -> Match:
        if self.find_match(tx, user_a, user_b):
            raise ConflictError(f"Users {user_a} and {user_b} are already matched")
        user1_id, user2_id = canonical_pair(user_a, user_b)
        match = Match(
            match_id=uuid4(),
            user1_id=user1_id,
            user2_id=user2_id,
            created_at=datetime.now(UTC),
        )
        tx.matches[match.match_id] = match
        return match

    def delete_match(self, tx: InMemoryState, match_id: UUID4) -> bool:
        return tx.matches.pop(match_id, None) is not None

    def list_matches(self, tx: InMemoryState, user_id: UUID4) -> list[Match]:
        return [match for match in tx.matches.values() if match.involves(user_id)]

    def is_blocked(self, tx: InMemoryState, user_a: UUID4, user_b: UUID4) -> bool:
        return (user_a, user_b) in tx.blocks or (user_b, user_a) in tx.blocks

    def block_exists(
        self, tx: InMemoryState, blocker_id: UUID4, blocked_id: UUID4
    ) -> bool:
        return (blocker_id, blocked_id) in tx.blocks

    def create_block(
        self, tx: InMemoryState, blocker_id: UUID4, blocked_id: UUID4
    ) -> Block:
        if (blocker_id, blocked_id) in tx.blocks:
            raise AlreadyBlockedError(f"User {blocked_id} is already blocked")
        block = Block(
            blocker_id=blocker_id, blocked_id=blocked_id, created_at=datetime.now(UTC)
        )
        tx.blocks[(blocker_id, blocked_id)] = block
        return block

    def delete_block(
        self, tx: InMemoryState, blocker_id: UUID4, blocked_id: UUID4
    ) -> bool:
        return tx.blocks.pop((blocker_id, blocked_id), None) is not None

    def get_block_partner_ids(self, tx: InMemoryState, user_id: UUID4) -> set[UUID4]:
        partners = set()
        for blocker, blocked in tx.blocks:
            if blocker == user_id:
                partners.add(blocked)
            elif blocked == user_id:
                partners.add(blocker)
        return partners

    def list_blocks(self, tx: InMemoryState, blocker_id: UUID4) -> list[Block]:
        return [block for block in tx.blocks.values() if block.blocker_id == blocker_id]

    def create_report(
        self, tx: InMemoryState, reporter_id: UUID4, reported_id: UUID4, reason: str
    ) -> Report:
        if (reporter_id, reported_id) in tx.reports:
            raise AlreadyReportedError(f"User {reported_id} was already reported")
        report = Report(
            reporter_id=reporter_id,
            reported_id=reported_id,
            reason=reason,
            created_at=datetime.now(UTC),
        )
        tx.reports[(reporter_id, reported_id)] = report
        return report


class FakePhotoStore(PhotoStore):
    def list_photos(self, tx: InMemoryState, user_id: UUID4) -> list[Photo]:
        return _photos_of(tx, user_id)

    def count_photos(self, tx: InMemoryState, user_id: UUID4) -> int:
        return len(_photos_of(tx, user_id))

    def has_profile_photo(self, tx: InMemoryState, user_id: UUID4) -> bool:
        return any(photo.is_profile for photo in _photos_of(tx, user_id))

    def get_photo(
        self, tx: InMemoryState, user_id: UUID4, photo_id: UUID4
    ) -> Photo | None:
        photo = tx.photos.get(photo_id)
        return photo if photo and photo.user_id == user_id else None

    def create_photo(
        self, tx: InMemoryState, user_id: UUID4, file_path: str, is_profile: bool
    ) -> Photo:
        photo = Photo(
            photo_id=uuid4(),
            user_id=user_id,
            file_path=file_path,
            is_profile=is_profile,
            created_at=datetime.now(UTC),
        )
        tx.photos[photo.photo_id] = photo
        return photo

    def set_profile_photo(
        self, tx: InMemoryState, user_id: UUID4, photo_id: UUID4
    ) -> Photo:
        if self.get_photo(tx, user_id, photo_id) is None:
            raise PhotoNotFoundError(f"Photo {photo_id} not found")
        for photo in _photos_of(tx, user_id):
            tx.photos[photo.photo_id] = photo.model_copy(
                update={"is_profile": photo.photo_id == photo_id}
            )
        return tx.photos[photo_id]

    def delete_photo(self, tx: InMemoryState, user_id: UUID4, photo_id: UUID4) -> bool:
        if self.get_photo(tx, user_id, photo_id) is None:
            return False
        del tx.photos[photo_id]
        return True


class FakeNotificationStore(NotificationStore):
    def create(self, tx: InMemoryState, notification: Notification) -> Notification:
        if notification.recipient_id not in tx.users:
            raise ValueError(f"Recipient {notification.recipient_id} does not exist")
        tx.notifications[notification.notification_id] = notification
        return notification

    def _owned(self, tx: InMemoryState, recipient_id: UUID4) -> list[Notification]:
        return [n for n in tx.notifications.values() if n.recipient_id == recipient_id]

    def list_for(
        self, tx: InMemoryState, recipient_id: UUID4, limit: int
    ) -> list[tuple[Notification, User | None]]:
        newest = sorted(
            self._owned(tx, recipient_id), key=lambda n: n.created_at, reverse=True
        )
        return [(n, tx.users.get(n.actor_id)) for n in newest[:limit]]

    def unread_count(self, tx: InMemoryState, recipient_id: UUID4) -> int:
        return sum(1 for n in self._owned(tx, recipient_id) if not n.is_read)

    def mark_read(
        self, tx: InMemoryState, recipient_id: UUID4, notification_id: UUID4
    ) -> bool:
        notification = tx.notifications.get(notification_id)
        if notification is None or notification.recipient_id != recipient_id:
            return False
        tx.notifications[notification_id] = notification.model_copy(
            update={"is_read": True}
        )
        return True

    def mark_all_read(self, tx: InMemoryState, recipient_id: UUID4) -> int:
        unread = [n for n in self._owned(tx, recipient_id) if not n.is_read]
        for n in unread:
            tx.notifications[n.notification_id] = n.model_copy(update={"is_read": True})
        return len(unread)

    def delete(
        self, tx: InMemoryState, recipient_id: UUID4, notification_id: UUID4
    ) -> bool:
        notification = tx.notifications.get(notification_id)
        if notification is None or notification.recipient_id != recipient_id:
            return False
        del tx.notifications[notification_id]
        return True

    def delete_all(self, tx: InMemoryState, recipient_id: UUID4) -> int:
        owned = self._owned(tx, recipient_id)
        for n in owned:
            del tx.notifications[n.notification_id]
        return len(owned)


class FakeMessageStore(MessageStore):
    def create(self, tx: InMemoryState, message: Message) -> Message:
        tx.messages[message.message_id] = message
        return message

    def get(self, tx: InMemoryState, message_id: UUID4) -> Message | None:
        return tx.messages.get(message_id)

    def list_for_match(self, tx: InMemoryState, match_id: UUID4) -> list[Message]:
        return [m for m in tx.messages.values() if m.match_id == match_id]

    def mark_read(self, tx: InMemoryState, match_id: UUID4, receiver_id: UUID4) -> int:
        unread = [
            m
            for m in self.list_for_match(tx, match_id)
            if m.receiver_id == receiver_id and not m.is_read
        ]
        for m in unread:
            tx.messages[m.message_id] = m.model_copy(update={"is_read": True})
        return len(unread)

    def delete(self, tx: InMemoryState, message_id: UUID4) -> bool:
        return tx.messages.pop(message_id, None) is not None

    def delete_for_match(self, tx: InMemoryState, match_id: UUID4) -> int:
        doomed = [m.message_id for m in self.list_for_match(tx, match_id)]
        for message_id in doomed:
            del tx.messages[message_id]
        return len(doomed)


class RecordingSink(NotificationSink):
    """Sink that keeps emitted notifications in a list."""

    def __init__(self) -> None:
        self.emitted: list[Notification] = []

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
        self.emitted.append(notification)
        return notification

    def of_type(self, notification_type: NotificationType) -> list[Notification]:
        return [n for n in self.emitted if n.notification_type == notification_type]


def years_ago(years: int, today: date | None = None) -> date:
    """A birth date giving an age of exactly ``years`` today."""
    today = today or date.today()
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return (today - timedelta(days=1)).replace(year=today.year - years)


def seed_user(
    database: FakeDatabase,
    username: str,
    *,
    profile: dict[str, Any] | None = None,
    tags: tuple[str, ...] = (),
    photo: bool = True,
) -> User:
    """Add a user, and optionally a profile, tags and a profile picture.

    Args:
        database: Database to seed
        username: Username of the new user
        profile: Profile fields; no profile is created when None
        tags: Normalized tag names to attach
        photo: Whether to add a profile picture

    Returns:
        The created user
    """
    state = database.state
    user = User(
        user_id=uuid4(),
        username=username,
        email=f"{username}@example.com",
        first_name=username.capitalize(),
        last_name="Tester",
        is_verified=True,
        created_at=datetime.now(UTC),
    )
    state.users[user.user_id] = user
    if profile is not None:
        state.profiles[user.user_id] = Profile(user_id=user.user_id, **profile)
    tag_index = FakeTagIndex()
    for name in tags:
        tag = tag_index.create_tag(state, name)
        tag_index.attach_tag(state, user.user_id, tag.tag_id)
    if photo:
        FakePhotoStore().create_photo(
            state, user.user_id, f"uploads/{username}.jpg", True
        )
    return user
