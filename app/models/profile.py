from datetime import date, datetime
from enum import Enum
from typing import Annotated

from pydantic import UUID4, BaseModel, ConfigDict, Field, field_validator

from app.models.photo import Photo
from app.models.tag import Tag


class Gender(str, Enum):
    """Gender options for dating profiles."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class SexualPreference(str, Enum):
    """Sexual preference options for dating profiles."""

    HETEROSEXUAL = "heterosexual"
    HOMOSEXUAL = "homosexual"
    BISEXUAL = "bisexual"


class ProfileCounter(str, Enum):
    """Engagement counters kept on a profile."""

    VIEWS = "views_count"
    LIKES = "likes_count"
    MATCHES = "matches_count"


def age_on(birth_date: date, today: date) -> int:
    """Full years between a birth date and a reference day."""
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


class Profile(BaseModel):
    """Dating profile information and engagement counters.

    A profile is one-to-one with a user and is created lazily on the first
    profile update.

    Attributes:
        user_id: ID of the owning user
        gender: User's gender, unset until the profile is completed
        sexual_preference: Who the user wants to meet
        bio: Short biography or description
        birth_date: Birth date used for age calculation
        latitude: Latitude of the user's location
        longitude: Longitude of the user's location
        last_location: Human readable location label
        fame_rating: Popularity score between 0 and 100
        views_count: Number of profile views received
        likes_count: Number of likes received
        matches_count: Number of current matches
        created_at: When the profile was created
        updated_at: When the profile was last updated
    """

    model_config = ConfigDict(frozen=True)

    user_id: UUID4
    gender: Gender | None = None
    sexual_preference: SexualPreference | None = SexualPreference.BISEXUAL
    bio: str | None = None
    birth_date: date | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    last_location: str | None = None
    fame_rating: Annotated[float, Field(ge=0, le=100)] = 0
    views_count: Annotated[int, Field(ge=0)] = 0
    likes_count: Annotated[int, Field(ge=0)] = 0
    matches_count: Annotated[int, Field(ge=0)] = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        """Whether the profile has what browsing needs."""
        return self.gender is not None and self.sexual_preference is not None

    def age(self, today: date | None = None) -> int | None:
        if self.birth_date is None:
            return None
        return age_on(self.birth_date, today or date.today())


class ProfileUpdate(BaseModel):
    """Partial profile update. Fields left unset keep their stored value."""

    model_config = ConfigDict(frozen=True)

    gender: Gender | None = None
    sexual_preference: SexualPreference | None = None
    bio: Annotated[str | None, Field(max_length=2000)] = None
    birth_date: date | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    last_location: Annotated[str | None, Field(max_length=100)] = None

    @field_validator("sexual_preference")
    @classmethod
    def validate_sexual_preference(
        cls, v: SexualPreference | None
    ) -> SexualPreference | None:
        # Only runs when the field is given; a profile always keeps a preference
        if v is None:
            raise ValueError("Sexual preference cannot be cleared")
        return v

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: date | None) -> date | None:
        if v is not None and v > date.today():
            raise ValueError("Birth date cannot be in the future")
        return v


class ProfileDetails(BaseModel):
    """A profile together with its tags and photos."""

    model_config = ConfigDict(frozen=True)

    profile: Profile
    tags: list[Tag] = Field(default_factory=list)
    photos: list[Photo] = Field(default_factory=list)
