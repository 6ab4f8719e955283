from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import UUID4

from app.dependencies import ViewerId, get_candidate_selector, get_profile_service
from app.models.browse import (
    CandidateView,
    SearchFilters,
    SearchPage,
    SearchSort,
    SortDirection,
    SortField,
)
from app.services.browse import CandidateSelector
from app.services.profile import ProfileService

router = APIRouter(prefix="/browse", tags=["browse"])


@router.get("/suggestions", response_model=list[CandidateView])
async def get_suggestions(
    viewer_id: ViewerId,
    selector: Annotated[CandidateSelector, Depends(get_candidate_selector)],
) -> list[CandidateView]:
    """Get suggested profiles for the viewer, best match first.

    Args:
        viewer_id: The current viewer
        selector: Candidate selection service

    Returns:
        Eligible candidates ordered by compatibility
    """
    return await selector.select_suggestions(viewer_id)


@router.get("/search", response_model=SearchPage)
async def search_profiles(
    viewer_id: ViewerId,
    selector: Annotated[CandidateSelector, Depends(get_candidate_selector)],
    age_min: Annotated[int | None, Query(ge=0, le=150)] = None,
    age_max: Annotated[int | None, Query(ge=0, le=150)] = None,
    fame_min: Annotated[float | None, Query(ge=0, le=100)] = None,
    fame_max: Annotated[float | None, Query(ge=0, le=100)] = None,
    location: str | None = None,
    tags: Annotated[list[str], Query()] = [],
    sort_by: SortField = SortField.COMPATIBILITY,
    sort_order: SortDirection = SortDirection.DESC,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> SearchPage:
    """Search profiles with filters.

    Args:
        viewer_id: The current viewer
        selector: Candidate selection service
        age_min: Minimum age, inclusive
        age_max: Maximum age, inclusive
        fame_min: Minimum fame rating, inclusive
        fame_max: Maximum fame rating, inclusive
        location: Substring of the location label
        tags: Tags candidates must all have
        sort_by: Sort key
        sort_order: Sort direction
        page: 1-based page number
        limit: Page size

    Returns:
        The requested page of results
    """
    filters = SearchFilters(
        age_min=age_min,
        age_max=age_max,
        fame_min=fame_min,
        fame_max=fame_max,
        location=location,
        tags=tags,
    )
    return await selector.search(
        viewer_id,
        filters,
        SearchSort(field=sort_by, direction=sort_order),
        page=page,
        limit=limit,
    )


@router.get("/profile/{user_id}", response_model=CandidateView)
async def view_profile(
    user_id: UUID4,
    viewer_id: ViewerId,
    selector: Annotated[CandidateSelector, Depends(get_candidate_selector)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
) -> CandidateView:
    """Get another user's profile and record the visit.

    Args:
        user_id: ID of the user whose profile to show
        viewer_id: The current viewer
        selector: Candidate selection service
        profile_service: Profile service used to record the view

    Returns:
        The profile as seen by the viewer
    """
    view = await selector.view_profile(viewer_id, user_id)
    await profile_service.record_view(viewer_id, user_id)
    return view
