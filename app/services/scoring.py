from typing import AbstractSet

from pydantic import UUID4, BaseModel, ConfigDict

from app.config import ScoringWeights


class ScoreBreakdown(BaseModel):
    """Components of a compatibility score before weighting.

    Attributes:
        common_tags_count: Number of tags the viewer and candidate share
        tag_component: Shared tags as a share of the viewer's tags
        fame_component: Candidate fame rating scaled to [0, 1]
        proximity_component: Closeness scaled to [0, 1], 0 when distance is unknown
        score: Weighted sum of the three components
    """

    model_config = ConfigDict(frozen=True)

    common_tags_count: int
    tag_component: float
    fame_component: float
    proximity_component: float
    score: float


class CompatibilityScorer:
    """Scores how well a candidate fits a viewer.

    The score is a fixed-weight sum. An unknown distance contributes nothing
    and its weight is not redistributed to the other components.
    """

    def __init__(self, weights: ScoringWeights | None = None) -> None:
        self.weights = weights or ScoringWeights()

    def breakdown(
        self,
        viewer_tag_ids: AbstractSet[UUID4],
        candidate_tag_ids: AbstractSet[UUID4],
        candidate_fame_rating: float,
        distance_km: float | None,
    ) -> ScoreBreakdown:
        common = len(viewer_tag_ids & candidate_tag_ids)
        tag_component = common / max(len(viewer_tag_ids), 1)
        fame_component = _clamp(candidate_fame_rating / 100)
        if distance_km is None:
            proximity_component = 0.0
        else:
            capped = min(max(distance_km, 0.0), self.weights.max_distance_km)
            proximity_component = 1 - capped / self.weights.max_distance_km

        score = (
            self.weights.fame * fame_component
            + self.weights.tags * tag_component
            + self.weights.proximity * proximity_component
        )
        return ScoreBreakdown(
            common_tags_count=common,
            tag_component=tag_component,
            fame_component=fame_component,
            proximity_component=proximity_component,
            score=_clamp(score),
        )

    def score(
        self,
        viewer_tag_ids: AbstractSet[UUID4],
        candidate_tag_ids: AbstractSet[UUID4],
        candidate_fame_rating: float,
        distance_km: float | None,
    ) -> float:
        """Compatibility of a candidate for a viewer.

        Args:
            viewer_tag_ids: Tags held by the viewer
            candidate_tag_ids: Tags held by the candidate
            candidate_fame_rating: Candidate fame rating in [0, 100]
            distance_km: Distance between the two, None if either lacks coordinates

        Returns:
            Score in [0, 1]
        """
        return self.breakdown(
            viewer_tag_ids, candidate_tag_ids, candidate_fame_rating, distance_km
        ).score


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))
