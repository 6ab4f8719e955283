import re

from pydantic import UUID4, BaseModel, ConfigDict, field_validator

from app.errors import InvalidTagError

TAG_PATTERN = re.compile(r"^#[A-Za-z0-9]+$")


def normalize_tag_name(raw: str) -> str:
    """Normalize user input into a tag name.

    Surrounding whitespace is stripped and a leading ``#`` is added when
    missing before the result is checked against the tag format.

    Args:
        raw: Tag as typed by the user, e.g. ``fitness`` or ``#fitness``

    Returns:
        The normalized tag name

    Raises:
        InvalidTagError: If the result is not ``#`` followed by letters or digits
    """
    name = raw.strip()
    if not name.startswith("#"):
        name = f"#{name}"
    if not TAG_PATTERN.match(name):
        raise InvalidTagError(f"Invalid tag name: {raw!r}")
    return name


class Tag(BaseModel):
    """Interest tag that users attach to their profile.

    Attributes:
        tag_id: Unique identifier for the tag
        name: Normalized tag name, e.g. ``#travel``
    """

    model_config = ConfigDict(frozen=True)

    tag_id: UUID4
    name: str

    @field_validator("name")
    def validate_name(cls, v: str) -> str:
        if not TAG_PATTERN.match(v):
            raise ValueError("Tag names must match #[A-Za-z0-9]+")
        return v
