from datetime import datetime

from pydantic import UUID4, BaseModel, ConfigDict, model_validator


def canonical_pair(user_a: UUID4, user_b: UUID4) -> tuple[UUID4, UUID4]:
    """Order a pair of user ids so the smaller one comes first."""
    return (user_a, user_b) if user_a < user_b else (user_b, user_a)


def pair_key(user_a: UUID4, user_b: UUID4) -> str:
    """Storage key identifying an unordered pair of users."""
    first, second = canonical_pair(user_a, user_b)
    return f"{first}:{second}"


class Match(BaseModel):
    """Mutual like between two users.

    Stored once per pair with the smaller user id first.

    Attributes:
        match_id: Unique identifier for the match
        user1_id: The smaller of the two user ids
        user2_id: The larger of the two user ids
        created_at: When the match was created
    """

    model_config = ConfigDict(frozen=True)

    match_id: UUID4
    user1_id: UUID4
    user2_id: UUID4
    created_at: datetime

    @model_validator(mode="after")
    def validate_ordering(self) -> "Match":
        if not self.user1_id < self.user2_id:
            raise ValueError("Match users must be stored in canonical order")
        return self

    def involves(self, user_id: UUID4) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def other_party(self, user_id: UUID4) -> UUID4:
        """Return the user on the other side of the match."""
        if user_id == self.user1_id:
            return self.user2_id
        if user_id == self.user2_id:
            return self.user1_id
        raise ValueError("User is not part of this match")


class MatchStatus(BaseModel):
    """Whether two users are currently matched."""

    model_config = ConfigDict(frozen=True)

    is_match: bool
    match_id: UUID4 | None = None
