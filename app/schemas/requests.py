from pydantic import BaseModel, ConfigDict, Field


class TagRequest(BaseModel):
    """Tag to add, with or without the leading ``#``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=50)


class PhotoRequest(BaseModel):
    """Photo already stored by the upload collaborator."""

    model_config = ConfigDict(frozen=True)

    file_path: str = Field(min_length=1, max_length=500)


class ReportRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: str | None = Field(None, max_length=500)


class MessageRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str = Field(max_length=5000)
