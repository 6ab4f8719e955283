from datetime import datetime

from pydantic import UUID4, BaseModel, ConfigDict, Field

MAX_PHOTOS_PER_USER = 5


class Photo(BaseModel):
    """Photo attached to a user's profile.

    Attributes:
        photo_id: Unique identifier for the photo
        user_id: ID of the owning user
        file_path: Where the upload collaborator stored the file
        is_profile: Whether this is the user's profile picture
        created_at: When the photo was added
    """

    model_config = ConfigDict(frozen=True)

    photo_id: UUID4
    user_id: UUID4
    file_path: str = Field(min_length=1)
    is_profile: bool = False
    created_at: datetime


def profile_picture_path(photos: list[Photo]) -> str | None:
    """Path of the first photo flagged as profile picture, if any."""
    return next((photo.file_path for photo in photos if photo.is_profile), None)
