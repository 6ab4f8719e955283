from datetime import datetime

from pydantic import UUID4, BaseModel, ConfigDict


class Like(BaseModel):
    """Directed like from one user to another.

    Attributes:
        liker_id: ID of the user who gave the like
        liked_id: ID of the user who received the like
        created_at: When the like was created
    """

    model_config = ConfigDict(frozen=True)

    liker_id: UUID4
    liked_id: UUID4
    created_at: datetime
