import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from app.api import browse, chat, interaction, notification, profile
from app.config import get_settings
from app.db import DatabaseManager
from app.dependencies import get_stores
from app.errors import (
    ConflictError,
    DatingCoreError,
    NotFoundError,
    PreconditionError,
    StateError,
    ValidationError,
)
from app.schemas.responses import ErrorResponseSchema, HealthCheckResponseSchema
from app.services.presence import PresenceService
from app.utils.logging_config import setup_logger

logger = logging.getLogger(__name__)

ERROR_STATUS: tuple[tuple[type[DatingCoreError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PreconditionError, status.HTTP_412_PRECONDITION_FAILED),
    (StateError, status.HTTP_409_CONFLICT),
)


def status_for(error: DatingCoreError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logger(level=get_settings().log_level)
    this_db = DatabaseManager()
    this_db.apply_constraints()
    app.state.driver = this_db.driver
    app.state.presence = PresenceService(this_db, get_stores().users)
    yield
    this_db.close()


app = FastAPI(lifespan=lifespan)


@app.exception_handler(DatingCoreError)
async def dating_core_error_handler(
    request: Request, exc: DatingCoreError
) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(
        "%s %s failed with %s: %s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc,
    )
    body = ErrorResponseSchema(detail=str(exc), error=type(exc).__name__)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(PydanticValidationError)
async def model_validation_error_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    # Raised when query parameters combine into an invalid model
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors(include_url=False))},
    )


@app.get("/api/health", response_model=HealthCheckResponseSchema)
async def health_check() -> HealthCheckResponseSchema:
    return HealthCheckResponseSchema(success=True)


for router in (
    browse.router,
    interaction.router,
    profile.router,
    notification.router,
    chat.router,
):
    app.include_router(router, prefix="/api")
