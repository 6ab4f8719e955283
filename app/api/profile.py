from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import UUID4

from app.dependencies import ViewerId, get_profile_service
from app.models.photo import Photo
from app.models.profile import Profile, ProfileDetails, ProfileUpdate
from app.models.tag import Tag
from app.schemas.requests import PhotoRequest, TagRequest
from app.services.profile import ProfileService

router = APIRouter(prefix="/profile", tags=["profile"])

ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]


@router.get("", response_model=ProfileDetails)
async def get_own_profile(
    viewer_id: ViewerId, profile_service: ProfileServiceDep
) -> ProfileDetails:
    """Get the viewer's own profile with tags and photos."""
    return await profile_service.get_profile(viewer_id)


@router.put("", response_model=Profile)
async def update_profile(
    update: ProfileUpdate, viewer_id: ViewerId, profile_service: ProfileServiceDep
) -> Profile:
    """Update profile fields, creating the profile on first use.

    Args:
        update: Fields to change; omitted fields keep their value
        viewer_id: The current viewer
        profile_service: Profile service

    Returns:
        The updated profile
    """
    return await profile_service.update_profile(viewer_id, update)


@router.post("/tags", response_model=Tag, status_code=status.HTTP_201_CREATED)
async def add_tag(
    request: TagRequest, viewer_id: ViewerId, profile_service: ProfileServiceDep
) -> Tag:
    return await profile_service.add_tag(viewer_id, request.name)


@router.delete("/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_tag(
    tag_id: UUID4, viewer_id: ViewerId, profile_service: ProfileServiceDep
) -> None:
    await profile_service.remove_tag(viewer_id, tag_id)


@router.post("/photos", response_model=Photo, status_code=status.HTTP_201_CREATED)
async def add_photo(
    request: PhotoRequest, viewer_id: ViewerId, profile_service: ProfileServiceDep
) -> Photo:
    """Attach an uploaded photo to the profile."""
    return await profile_service.add_photo(viewer_id, request.file_path)


@router.put("/photos/{photo_id}/profile", response_model=Photo)
async def set_profile_photo(
    photo_id: UUID4, viewer_id: ViewerId, profile_service: ProfileServiceDep
) -> Photo:
    return await profile_service.set_profile_photo(viewer_id, photo_id)


@router.delete("/photos/{photo_id}", response_model=Photo)
async def delete_photo(
    photo_id: UUID4, viewer_id: ViewerId, profile_service: ProfileServiceDep
) -> Photo:
    return await profile_service.delete_photo(viewer_id, photo_id)
