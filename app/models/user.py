import re
from datetime import datetime

from pydantic import UUID4, BaseModel, ConfigDict, EmailStr, field_validator


class User(BaseModel):
    """User model representing an account in the system.

    Attributes:
        user_id: Unique identifier for the user
        username: Unique username for the user
        email: Unique email address
        first_name: User's first name
        last_name: User's last name
        is_verified: Whether the email address has been verified
        is_online: Whether the user currently has a live connection
        last_login: When the user was last seen
        created_at: When the account was created
    """

    model_config = ConfigDict(frozen=True)

    user_id: UUID4
    username: str
    email: EmailStr
    first_name: str = ""
    last_name: str = ""
    is_verified: bool = False
    is_online: bool = False
    last_login: datetime | None = None
    created_at: datetime | None = None

    @field_validator("username")
    def validate_username(cls, v: str) -> str:
        if not re.match(r"^[a-zA-Z0-9_]{3,20}$", v):
            raise ValueError("Username must be 3-20 alphanumeric characters")
        return v

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.username
