from pydantic import UUID4, BaseModel, ConfigDict, Field

from app.models.like import Like


class LikeRecord(BaseModel):
    """Result of liking a user.

    Attributes:
        success: Whether the operation was successful
        like: The created like
        is_match: Whether the like completed a mutual like
        match_id: ID of the match when one exists
    """

    model_config = ConfigDict(frozen=True)

    success: bool = Field(description="Whether the operation was successful")
    like: Like = Field(description="The created like")
    is_match: bool = Field(description="Whether the like completed a mutual like")
    match_id: UUID4 | None = Field(None, description="ID of the match when one exists")


class UnlikeRecord(BaseModel):
    """Result of removing a like.

    Attributes:
        success: Whether the operation was successful
        was_match: Whether removing the like ended a match
        match_id: ID of the removed match, if any
    """

    model_config = ConfigDict(frozen=True)

    success: bool = Field(description="Whether the operation was successful")
    was_match: bool = Field(description="Whether removing the like ended a match")
    match_id: UUID4 | None = Field(None, description="ID of the removed match")


class CreateBlockRecord(BaseModel):
    """Record of a block relationship creation.

    Attributes:
        success: Whether the operation was successful
        blocked_user_id: ID of the user who was blocked
        removed_forward_like: Whether a like from blocker to blocked was removed
        removed_reverse_like: Whether a like from blocked to blocker was removed
        removed_match_id: ID of the match removed by the block, if any
    """

    model_config = ConfigDict(frozen=True)

    success: bool = Field(description="Whether the operation was successful")
    blocked_user_id: UUID4 = Field(description="ID of the user who was blocked")
    removed_forward_like: bool = Field(
        description="Whether a like from blocker to blocked was removed"
    )
    removed_reverse_like: bool = Field(
        description="Whether a like from blocked to blocker was removed"
    )
    removed_match_id: UUID4 | None = Field(
        None, description="ID of the match removed by the block"
    )


class RemoveBlockRecord(BaseModel):
    """Record of a block relationship removal.

    Attributes:
        success: Whether the operation was successful
        unblocked_user_id: ID of the user who was unblocked
    """

    model_config = ConfigDict(frozen=True)

    success: bool = Field(description="Whether the operation was successful")
    unblocked_user_id: UUID4 = Field(description="ID of the user who was unblocked")
