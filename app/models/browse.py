from datetime import date, datetime
from enum import Enum
from typing import Annotated

from pydantic import (
    UUID4,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)

from app.models.photo import Photo
from app.models.profile import Gender, Profile, SexualPreference
from app.models.tag import Tag, normalize_tag_name
from app.models.user import User


class SortField(str, Enum):
    """Keys a search can be ordered by."""

    AGE = "age"
    DISTANCE = "distance"
    FAME = "fame"
    TAGS = "tags"
    COMPATIBILITY = "compatibility"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SearchSort(BaseModel):
    """Ordering of search results.

    Candidates whose sort value is unknown (no birth date, no coordinates)
    are always placed last, whatever the direction.
    """

    model_config = ConfigDict(frozen=True)

    field: SortField = SortField.COMPATIBILITY
    direction: SortDirection = SortDirection.DESC


class SearchFilters(BaseModel):
    """Filter criteria for an advanced search.

    Attributes:
        age_min: Minimum age, inclusive
        age_max: Maximum age, inclusive
        fame_min: Minimum fame rating, inclusive
        fame_max: Maximum fame rating, inclusive
        location: Case-insensitive substring of the candidate's location label
        tags: Tags the candidate must all have
    """

    model_config = ConfigDict(frozen=True)

    age_min: Annotated[int | None, Field(ge=0, le=150)] = None
    age_max: Annotated[int | None, Field(ge=0, le=150)] = None
    fame_min: Annotated[float | None, Field(ge=0, le=100)] = None
    fame_max: Annotated[float | None, Field(ge=0, le=100)] = None
    location: str | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("age_max")
    @classmethod
    def validate_age_range(cls, v: int | None, info: ValidationInfo) -> int | None:
        """Validate that max age is not below min age."""
        age_min = info.data.get("age_min")
        if v is not None and age_min is not None and v < age_min:
            raise ValueError("Maximum age must be greater than minimum age")
        return v

    @field_validator("fame_max")
    @classmethod
    def validate_fame_range(
        cls, v: float | None, info: ValidationInfo
    ) -> float | None:
        fame_min = info.data.get("fame_min")
        if v is not None and fame_min is not None and v < fame_min:
            raise ValueError("Maximum fame must be greater than minimum fame")
        return v

    @field_validator("location")
    @classmethod
    def strip_location(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    def normalized_tags(self) -> tuple[str, ...]:
        """Requested tags in normalized form, without duplicates.

        Raises:
            InvalidTagError: If one of the tags is malformed
        """
        return tuple(dict.fromkeys(normalize_tag_name(tag) for tag in self.tags))


class CandidateRecord(BaseModel):
    """Everything the store knows about one candidate."""

    model_config = ConfigDict(frozen=True)

    user: User
    profile: Profile
    tags: list[Tag] = Field(default_factory=list)
    photos: list[Photo] = Field(default_factory=list)

    @property
    def tag_ids(self) -> frozenset[UUID4]:
        return frozenset(tag.tag_id for tag in self.tags)


class CandidateQuery(BaseModel):
    """Storage-level filter for the candidate pool.

    Stores translate this into their own query language; ``matches`` is the
    reference predicate they must agree with.

    Attributes:
        exclude_ids: Users never returned (the viewer and blocked users)
        genders: Allowed candidate genders, None for no restriction
        preferences: Allowed candidate preferences, None for no restriction
        age_min: Minimum age, inclusive
        age_max: Maximum age, inclusive
        fame_min: Minimum fame rating, inclusive
        fame_max: Maximum fame rating, inclusive
        location: Case-insensitive location substring
        tag_names: Tags a candidate must all have
        today: Reference day for age calculation
    """

    model_config = ConfigDict(frozen=True)

    exclude_ids: frozenset[UUID4] = frozenset()
    genders: frozenset[Gender] | None = None
    preferences: frozenset[SexualPreference] | None = None
    age_min: int | None = None
    age_max: int | None = None
    fame_min: float | None = None
    fame_max: float | None = None
    location: str | None = None
    tag_names: tuple[str, ...] = ()
    today: date = Field(default_factory=date.today)

    def matches(self, record: CandidateRecord) -> bool:
        profile = record.profile
        if profile.user_id in self.exclude_ids:
            return False
        if self.genders is not None and profile.gender not in self.genders:
            return False
        if (
            self.preferences is not None
            and profile.sexual_preference not in self.preferences
        ):
            return False
        if self.age_min is not None or self.age_max is not None:
            age = profile.age(self.today)
            if age is None:
                return False
            if self.age_min is not None and age < self.age_min:
                return False
            if self.age_max is not None and age > self.age_max:
                return False
        if self.fame_min is not None and profile.fame_rating < self.fame_min:
            return False
        if self.fame_max is not None and profile.fame_rating > self.fame_max:
            return False
        if self.location is not None:
            label = profile.last_location or ""
            if self.location.lower() not in label.lower():
                return False
        if self.tag_names:
            held = {tag.name for tag in record.tags}
            if not all(name in held for name in self.tag_names):
                return False
        return True


class CandidateView(BaseModel):
    """A candidate as shown to the viewer.

    Attributes:
        user_id: ID of the candidate
        username: Candidate's username
        first_name: Candidate's first name
        last_name: Candidate's last name
        gender: Candidate's gender
        sexual_preference: Candidate's sexual preference
        bio: Candidate's biography
        birth_date: Candidate's birth date
        age: Age in full years, if the birth date is known
        location: Candidate's location label
        distance_km: Distance to the viewer, if both have coordinates
        fame_rating: Candidate's fame rating
        is_online: Whether the candidate is online
        last_login: When the candidate was last seen
        common_tags_count: Number of tags shared with the viewer
        compatibility_score: Weighted compatibility in [0, 1]
        tags: Candidate's tags
        photos: Candidate's photos
        profile_picture: Path of the candidate's profile picture
        is_liked: Whether the viewer has liked the candidate
        is_match: Whether the viewer and candidate are matched
        match_id: ID of the match, if any
    """

    model_config = ConfigDict(frozen=True)

    user_id: UUID4
    username: str
    first_name: str
    last_name: str
    gender: Gender | None
    sexual_preference: SexualPreference | None
    bio: str | None
    birth_date: date | None
    age: int | None
    location: str | None
    distance_km: float | None
    fame_rating: float
    is_online: bool
    last_login: datetime | None
    common_tags_count: int
    compatibility_score: Annotated[float, Field(ge=0, le=1)]
    tags: list[Tag]
    photos: list[Photo]
    profile_picture: str | None
    is_liked: bool = False
    is_match: bool = False
    match_id: UUID4 | None = None


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    page: int
    limit: int
    pages: int


class SearchPage(BaseModel):
    """One page of search results."""

    model_config = ConfigDict(frozen=True)

    results: list[CandidateView]
    pagination: Pagination
