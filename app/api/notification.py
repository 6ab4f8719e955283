from typing import Annotated

from fastapi import APIRouter, Query, status
from pydantic import UUID4

from app.dependencies import NotificationServiceDep, ViewerId
from app.models.notification import NotificationFeed
from app.schemas.responses import CountResponseSchema
from app.services.notification import DEFAULT_FEED_LIMIT

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationFeed)
async def get_notifications(
    viewer_id: ViewerId,
    notification_service: NotificationServiceDep,
    limit: Annotated[int, Query(ge=1, le=100)] = DEFAULT_FEED_LIMIT,
) -> NotificationFeed:
    """Get the viewer's newest notifications and unread count."""
    return await notification_service.list_notifications(viewer_id, limit)


@router.put("/read-all", response_model=CountResponseSchema)
async def mark_all_as_read(
    viewer_id: ViewerId, notification_service: NotificationServiceDep
) -> CountResponseSchema:
    count = await notification_service.mark_all_as_read(viewer_id)
    return CountResponseSchema(count=count)


@router.put("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_as_read(
    notification_id: UUID4,
    viewer_id: ViewerId,
    notification_service: NotificationServiceDep,
) -> None:
    await notification_service.mark_as_read(viewer_id, notification_id)


@router.delete("", response_model=CountResponseSchema)
async def delete_all_notifications(
    viewer_id: ViewerId, notification_service: NotificationServiceDep
) -> CountResponseSchema:
    count = await notification_service.delete_all(viewer_id)
    return CountResponseSchema(count=count)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: UUID4,
    viewer_id: ViewerId,
    notification_service: NotificationServiceDep,
) -> None:
    await notification_service.delete(viewer_id, notification_id)
