import logging
import math
from datetime import date
from typing import Any, Callable

from neo4j import ManagedTransaction
from pydantic import UUID4, BaseModel, ConfigDict

from app.config import Settings, get_settings
from app.errors import (
    ProfileIncompleteError,
    ProfileNotFoundError,
    SelfViewError,
    ValidationError,
)
from app.models.browse import (
    CandidateQuery,
    CandidateRecord,
    CandidateView,
    Pagination,
    SearchFilters,
    SearchPage,
    SearchSort,
    SortDirection,
    SortField,
)
from app.models.match import Match
from app.models.photo import profile_picture_path
from app.models.profile import Gender, Profile, SexualPreference
from app.repositories.base import InteractionLedger, ProfileStore, TagIndex
from app.services.scoring import CompatibilityScorer
from app.utils.geo import distance_between

logger = logging.getLogger(__name__)

Eligibility = tuple[frozenset[Gender] | None, frozenset[SexualPreference] | None]

_OPEN_TO_MEN_AND_WOMEN = frozenset(
    {SexualPreference.HETEROSEXUAL, SexualPreference.BISEXUAL}
)
_OPEN_TO_SAME_GENDER = frozenset(
    {SexualPreference.HOMOSEXUAL, SexualPreference.BISEXUAL}
)

ELIGIBILITY: dict[tuple[Gender, SexualPreference], Eligibility] = {
    (Gender.MALE, SexualPreference.HETEROSEXUAL): (
        frozenset({Gender.FEMALE}),
        _OPEN_TO_MEN_AND_WOMEN,
    ),
    (Gender.FEMALE, SexualPreference.HETEROSEXUAL): (
        frozenset({Gender.MALE}),
        _OPEN_TO_MEN_AND_WOMEN,
    ),
    (Gender.MALE, SexualPreference.HOMOSEXUAL): (
        frozenset({Gender.MALE}),
        _OPEN_TO_SAME_GENDER,
    ),
    (Gender.FEMALE, SexualPreference.HOMOSEXUAL): (
        frozenset({Gender.FEMALE}),
        _OPEN_TO_SAME_GENDER,
    ),
}


def eligibility_for(profile: Profile) -> Eligibility:
    """Genders and preferences a viewer can be shown.

    Bisexual viewers, viewers of another gender and incomplete profiles get no
    restriction.
    """
    if profile.gender is None or profile.sexual_preference is None:
        return None, None
    return ELIGIBILITY.get((profile.gender, profile.sexual_preference), (None, None))


class BrowseContext(BaseModel):
    """Everything about the viewer that candidate views depend on."""

    model_config = ConfigDict(frozen=True)

    viewer: Profile
    viewer_tag_ids: frozenset[UUID4]
    liked_ids: frozenset[UUID4]
    matches: dict[UUID4, Match]
    candidates: list[CandidateRecord]


class CandidateSelector:
    """Read-only selection, scoring and ordering of candidates for a viewer.

    Nothing here writes: recording a profile view is done separately by
    ``ProfileService.record_view``.
    """

    def __init__(
        self,
        database,
        profiles: ProfileStore,
        tags: TagIndex,
        ledger: InteractionLedger,
        scorer: CompatibilityScorer | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.database = database
        self.profiles = profiles
        self.tags = tags
        self.ledger = ledger
        self.settings = settings or get_settings()
        self.scorer = scorer or CompatibilityScorer(self.settings.scoring)

    def _require_complete_profile(
        self, tx: ManagedTransaction, viewer_id: UUID4
    ) -> Profile:
        viewer = self.profiles.get_profile(tx, viewer_id)
        if viewer is None or not viewer.is_complete:
            raise ProfileIncompleteError(
                "Complete your profile with gender and sexual preference first"
            )
        return viewer

    def _load_context(
        self,
        tx: ManagedTransaction,
        viewer_id: UUID4,
        filters: SearchFilters | None,
        today: date,
    ) -> BrowseContext:
        viewer = self._require_complete_profile(tx, viewer_id)
        genders, preferences = eligibility_for(viewer)
        excluded = {viewer_id} | self.ledger.get_block_partner_ids(tx, viewer_id)
        query_fields: dict[str, Any] = {}
        if filters is not None:
            query_fields = {
                "age_min": filters.age_min,
                "age_max": filters.age_max,
                "fame_min": filters.fame_min,
                "fame_max": filters.fame_max,
                "location": filters.location,
                "tag_names": filters.normalized_tags(),
            }
        query = CandidateQuery(
            exclude_ids=frozenset(excluded),
            genders=genders,
            preferences=preferences,
            today=today,
            **query_fields,
        )
        return BrowseContext(
            viewer=viewer,
            viewer_tag_ids=frozenset(self.tags.get_tag_ids(tx, viewer_id)),
            liked_ids=frozenset(self.ledger.get_liked_ids(tx, viewer_id)),
            matches={
                match.other_party(viewer_id): match
                for match in self.ledger.list_matches(tx, viewer_id)
            },
            candidates=self.profiles.find_candidates(tx, query),
        )

    def _build_view(
        self, context: BrowseContext, record: CandidateRecord, today: date
    ) -> CandidateView:
        viewer = context.viewer
        profile = record.profile
        distance_km = distance_between(
            viewer.latitude, viewer.longitude, profile.latitude, profile.longitude
        )
        breakdown = self.scorer.breakdown(
            context.viewer_tag_ids, record.tag_ids, profile.fame_rating, distance_km
        )
        match = context.matches.get(profile.user_id)
        return CandidateView(
            user_id=record.user.user_id,
            username=record.user.username,
            first_name=record.user.first_name,
            last_name=record.user.last_name,
            gender=profile.gender,
            sexual_preference=profile.sexual_preference,
            bio=profile.bio,
            birth_date=profile.birth_date,
            age=profile.age(today),
            location=profile.last_location,
            distance_km=distance_km,
            fame_rating=profile.fame_rating,
            is_online=record.user.is_online,
            last_login=record.user.last_login,
            common_tags_count=breakdown.common_tags_count,
            compatibility_score=breakdown.score,
            tags=record.tags,
            photos=record.photos,
            profile_picture=profile_picture_path(record.photos),
            is_liked=profile.user_id in context.liked_ids,
            is_match=match is not None,
            match_id=match.match_id if match else None,
        )

    async def select_suggestions(self, viewer_id: UUID4) -> list[CandidateView]:
        """Get every eligible candidate for a viewer, best match first.

        Args:
            viewer_id: ID of the viewing user

        Returns:
            Candidate views ordered by compatibility score descending

        Raises:
            ProfileIncompleteError: If the viewer's profile lacks gender or preference
        """
        today = date.today()
        context = self.database.execute_read(
            self._load_context, viewer_id, None, today
        )
        views = [self._build_view(context, record, today) for record in context.candidates]
        return sort_candidates(views, SearchSort())

    async def search(
        self,
        viewer_id: UUID4,
        filters: SearchFilters,
        sort: SearchSort | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> SearchPage:
        """Search candidates with filters, ordering and pagination.

        Args:
            viewer_id: ID of the viewing user
            filters: Age, fame, location and tag criteria
            sort: Ordering, compatibility descending by default
            page: 1-based page number
            limit: Page size, the configured default when omitted

        Returns:
            The requested page and the pagination summary

        Raises:
            ProfileIncompleteError: If the viewer's profile lacks gender or preference
            InvalidTagError: If a tag filter is malformed
        """
        sort = sort or SearchSort()
        if limit is None:
            limit = self.settings.search_default_limit
        if page < 1:
            raise ValidationError("Page must be at least 1")
        if limit < 1:
            raise ValidationError("Limit must be at least 1")

        filters.normalized_tags()
        today = date.today()
        context = self.database.execute_read(
            self._load_context, viewer_id, filters, today
        )
        views = sort_candidates(
            [self._build_view(context, record, today) for record in context.candidates],
            sort,
        )
        total = len(views)
        start = (page - 1) * limit
        logger.debug(
            "Search for %s matched %d candidates (page %d)", viewer_id, total, page
        )
        return SearchPage(
            results=views[start : start + limit],
            pagination=Pagination(
                total=total, page=page, limit=limit, pages=math.ceil(total / limit)
            ),
        )

    def _load_profile_view(
        self, tx: ManagedTransaction, viewer_id: UUID4, target_id: UUID4, today: date
    ) -> CandidateView:
        if self.ledger.is_blocked(tx, viewer_id, target_id):
            raise ProfileNotFoundError(f"Profile {target_id} not found")
        record = self.profiles.get_candidate(tx, target_id)
        if record is None:
            raise ProfileNotFoundError(f"Profile {target_id} not found")
        viewer = self.profiles.get_profile(tx, viewer_id) or Profile(user_id=viewer_id)
        match = self.ledger.find_match(tx, viewer_id, target_id)
        context = BrowseContext(
            viewer=viewer,
            viewer_tag_ids=frozenset(self.tags.get_tag_ids(tx, viewer_id)),
            liked_ids=(
                frozenset({target_id})
                if self.ledger.like_exists(tx, viewer_id, target_id)
                else frozenset()
            ),
            matches={target_id: match} if match else {},
            candidates=[record],
        )
        return self._build_view(context, record, today)

    async def view_profile(self, viewer_id: UUID4, target_id: UUID4) -> CandidateView:
        """Get another user's profile as the viewer sees it.

        Args:
            viewer_id: ID of the viewing user
            target_id: ID of the user whose profile is shown

        Returns:
            The target as a candidate view, scored against the viewer

        Raises:
            SelfViewError: If the viewer asks for their own profile
            ProfileNotFoundError: If the target has no profile or a block separates them
        """
        if viewer_id == target_id:
            raise SelfViewError("Use the profile endpoints to see your own profile")
        return self.database.execute_read(
            self._load_profile_view, viewer_id, target_id, date.today()
        )


SORT_KEYS: dict[SortField, Callable[[CandidateView], float | int | None]] = {
    SortField.AGE: lambda view: view.age,
    SortField.DISTANCE: lambda view: view.distance_km,
    SortField.FAME: lambda view: view.fame_rating,
    SortField.TAGS: lambda view: view.common_tags_count,
    SortField.COMPATIBILITY: lambda view: view.compatibility_score,
}


def sort_candidates(views: list[CandidateView], sort: SearchSort) -> list[CandidateView]:
    """Order candidate views, keeping unknown values last in either direction.

    The sort is stable, so candidates with equal keys keep their input order.
    """
    key = SORT_KEYS[sort.field]
    known = [view for view in views if key(view) is not None]
    unknown = [view for view in views if key(view) is None]
    known.sort(key=key, reverse=sort.direction == SortDirection.DESC)
    return known + unknown
