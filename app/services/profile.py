import logging

from neo4j import ManagedTransaction
from pydantic import UUID4

from app.errors import (
    PhotoLimitError,
    PhotoNotFoundError,
    ProfileNotFoundError,
    TagAlreadyAttachedError,
    TagNotAttachedError,
    UserNotFoundError,
)
from app.models.notification import NotificationType
from app.models.photo import MAX_PHOTOS_PER_USER, Photo
from app.models.profile import Profile, ProfileCounter, ProfileDetails, ProfileUpdate
from app.models.tag import Tag, normalize_tag_name
from app.repositories.base import PhotoStore, ProfileStore, TagIndex, UserStore
from app.services.fame import FameRatingUpdater
from app.services.notification import NotificationSink

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for managing a user's own dating profile.

    This service handles:
    - Creating and updating profile fields
    - Attaching and detaching interest tags
    - Managing up to five photos and the profile picture among them
    - Recording views of a profile by other users
    """

    def __init__(
        self,
        database,
        users: UserStore,
        profiles: ProfileStore,
        tags: TagIndex,
        photos: PhotoStore,
        sink: NotificationSink,
        fame: FameRatingUpdater,
    ) -> None:
        self.database = database
        self.users = users
        self.profiles = profiles
        self.tags = tags
        self.photos = photos
        self.sink = sink
        self.fame = fame

    def _get_profile(self, tx: ManagedTransaction, user_id: UUID4) -> ProfileDetails:
        profile = self.profiles.get_profile(tx, user_id)
        if profile is None:
            raise ProfileNotFoundError(f"Profile for user {user_id} not found")
        return ProfileDetails(
            profile=profile,
            tags=self.tags.get_tags(tx, user_id),
            photos=self.photos.list_photos(tx, user_id),
        )

    async def get_profile(self, user_id: UUID4) -> ProfileDetails:
        """Get a user's profile with its tags and photos.

        Raises:
            ProfileNotFoundError: If the user has not created a profile yet
        """
        return self.database.execute_read(self._get_profile, user_id)

    async def update_profile(self, user_id: UUID4, update: ProfileUpdate) -> Profile:
        """Update profile fields, creating the profile on first use.

        Only the fields set on ``update`` are written.

        Args:
            user_id: ID of the profile owner
            update: Fields to change

        Returns:
            The stored profile

        Raises:
            UserNotFoundError: If the user does not exist
        """
        fields = update.model_dump(exclude_unset=True)
        return self.database.execute_write(self.profiles.upsert_profile, user_id, fields)

    def _add_tag(self, tx: ManagedTransaction, user_id: UUID4, name: str) -> Tag:
        if not self.users.user_exists(tx, user_id):
            raise UserNotFoundError(f"User {user_id} not found")
        tag = self.tags.get_tag_by_name(tx, name) or self.tags.create_tag(tx, name)
        if not self.tags.attach_tag(tx, user_id, tag.tag_id):
            raise TagAlreadyAttachedError(f"Tag {name} is already on the profile")
        return tag

    async def add_tag(self, user_id: UUID4, raw_name: str) -> Tag:
        """Attach an interest tag, creating the tag if nobody used it yet.

        Args:
            user_id: ID of the profile owner
            raw_name: Tag as typed, with or without the leading ``#``

        Returns:
            The attached tag

        Raises:
            InvalidTagError: If the name is not letters and digits
            UserNotFoundError: If the user does not exist
            TagAlreadyAttachedError: If the user already has the tag
        """
        name = normalize_tag_name(raw_name)
        return self.database.execute_write(self._add_tag, user_id, name)

    def _remove_tag(self, tx: ManagedTransaction, user_id: UUID4, tag_id: UUID4) -> None:
        if not self.tags.detach_tag(tx, user_id, tag_id):
            raise TagNotAttachedError(f"Tag {tag_id} is not on the profile")

    async def remove_tag(self, user_id: UUID4, tag_id: UUID4) -> None:
        """Detach a tag from a profile.

        Raises:
            TagNotAttachedError: If the user does not have the tag
        """
        self.database.execute_write(self._remove_tag, user_id, tag_id)

    def _add_photo(self, tx: ManagedTransaction, user_id: UUID4, file_path: str) -> Photo:
        if not self.users.user_exists(tx, user_id):
            raise UserNotFoundError(f"User {user_id} not found")
        if self.photos.count_photos(tx, user_id) >= MAX_PHOTOS_PER_USER:
            raise PhotoLimitError(
                f"A profile can have at most {MAX_PHOTOS_PER_USER} photos"
            )
        is_profile = not self.photos.has_profile_photo(tx, user_id)
        return self.photos.create_photo(tx, user_id, file_path, is_profile)

    async def add_photo(self, user_id: UUID4, file_path: str) -> Photo:
        """Register an uploaded photo. The first photo becomes the profile picture.

        Args:
            user_id: ID of the profile owner
            file_path: Where the upload was stored

        Returns:
            The created photo

        Raises:
            UserNotFoundError: If the user does not exist
            PhotoLimitError: If the user already has the maximum number of photos
        """
        return self.database.execute_write(self._add_photo, user_id, file_path)

    def _set_profile_photo(
        self, tx: ManagedTransaction, user_id: UUID4, photo_id: UUID4
    ) -> Photo:
        if self.photos.get_photo(tx, user_id, photo_id) is None:
            raise PhotoNotFoundError(f"Photo {photo_id} not found")
        return self.photos.set_profile_photo(tx, user_id, photo_id)

    async def set_profile_photo(self, user_id: UUID4, photo_id: UUID4) -> Photo:
        """Make one of the user's photos the profile picture.

        Raises:
            PhotoNotFoundError: If the user has no such photo
        """
        return self.database.execute_write(self._set_profile_photo, user_id, photo_id)

    def _delete_photo(
        self, tx: ManagedTransaction, user_id: UUID4, photo_id: UUID4
    ) -> Photo:
        photo = self.photos.get_photo(tx, user_id, photo_id)
        if photo is None:
            raise PhotoNotFoundError(f"Photo {photo_id} not found")
        self.photos.delete_photo(tx, user_id, photo_id)
        if photo.is_profile:
            if remaining := self.photos.list_photos(tx, user_id):
                self.photos.set_profile_photo(tx, user_id, remaining[0].photo_id)
        return photo

    async def delete_photo(self, user_id: UUID4, photo_id: UUID4) -> Photo:
        """Delete a photo.

        When the profile picture is deleted, the oldest remaining photo takes
        its place.

        Raises:
            PhotoNotFoundError: If the user has no such photo
        """
        return self.database.execute_write(self._delete_photo, user_id, photo_id)

    def _record_view(self, tx: ManagedTransaction, target_id: UUID4) -> None:
        if self.profiles.get_profile(tx, target_id) is None:
            raise ProfileNotFoundError(f"Profile for user {target_id} not found")
        self.profiles.increment_counter(tx, target_id, ProfileCounter.VIEWS, 1)

    async def record_view(self, viewer_id: UUID4, target_id: UUID4) -> None:
        """Count a view of the target's profile and notify the target.

        Every call counts as a view. Callers skip this for users viewing
        themselves.

        Raises:
            ProfileNotFoundError: If the target has no profile
        """
        self.database.execute_write(self._record_view, target_id)
        self.sink.emit(target_id, NotificationType.PROFILE_VIEW, viewer_id)
        self.fame.refresh(target_id)
