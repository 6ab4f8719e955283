from pydantic import BaseModel, ConfigDict, Field


class HealthCheckResponseSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = Field(description="Whether the service is up")


class CountResponseSchema(BaseModel):
    """Number of records affected by a bulk operation."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(ge=0, description="Number of affected records")


class ErrorResponseSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    detail: str = Field(description="What went wrong")
    error: str = Field(description="Name of the error")
