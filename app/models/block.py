from datetime import datetime

from pydantic import UUID4, BaseModel, ConfigDict, Field

DEFAULT_REPORT_REASON = "Fake account"


class Block(BaseModel):
    """Model representing a block relationship between users.

    This model contains information about a block relationship including
    who blocked whom and when.

    Attributes:
        blocker_id: ID of the user doing the blocking
        blocked_id: ID of the user being blocked
        created_at: When the block was created
    """

    model_config = ConfigDict(frozen=True)

    blocker_id: UUID4
    blocked_id: UUID4
    created_at: datetime


class Report(BaseModel):
    """A user flagging another account, usually as fake.

    Attributes:
        reporter_id: ID of the user filing the report
        reported_id: ID of the reported user
        reason: Free text reason
        created_at: When the report was filed
    """

    model_config = ConfigDict(frozen=True)

    reporter_id: UUID4
    reported_id: UUID4
    reason: str = Field(DEFAULT_REPORT_REASON, max_length=500)
    created_at: datetime
