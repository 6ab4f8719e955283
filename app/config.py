from functools import lru_cache
from os import environ
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ScoringWeights(BaseModel):
    """Weights of the compatibility score.

    The score is a fixed-weight sum, so the three weights must add up to 1
    for the result to stay inside [0, 1].

    Attributes:
        fame: Weight of the candidate's fame rating
        tags: Weight of the shared-interest ratio
        proximity: Weight of geographic closeness
        max_distance_km: Distance at which proximity stops contributing
    """

    model_config = ConfigDict(frozen=True)

    fame: Annotated[float, Field(ge=0, le=1)] = 0.2
    tags: Annotated[float, Field(ge=0, le=1)] = 0.5
    proximity: Annotated[float, Field(ge=0, le=1)] = 0.3
    max_distance_km: Annotated[float, Field(gt=0)] = 100.0

    @model_validator(mode="after")
    def validate_total(self) -> "ScoringWeights":
        if abs(self.fame + self.tags + self.proximity - 1.0) > 1e-9:
            raise ValueError("Scoring weights must sum to 1")
        return self


class FameRatingConfig(BaseModel):
    """Normalisation thresholds and weights of the fame rating.

    Each counter is scaled so that reaching its threshold yields 100 points,
    then the three scaled values are blended with the weights.

    Attributes:
        views_threshold: Profile views needed for a full views score
        likes_threshold: Likes received needed for a full likes score
        matches_threshold: Matches needed for a full matches score
        views_weight: Share of the views score in the rating
        likes_weight: Share of the likes score in the rating
        matches_weight: Share of the matches score in the rating
    """

    model_config = ConfigDict(frozen=True)

    views_threshold: Annotated[int, Field(gt=0)] = 100
    likes_threshold: Annotated[int, Field(gt=0)] = 50
    matches_threshold: Annotated[int, Field(gt=0)] = 20
    views_weight: Annotated[float, Field(ge=0, le=1)] = 0.3
    likes_weight: Annotated[float, Field(ge=0, le=1)] = 0.4
    matches_weight: Annotated[float, Field(ge=0, le=1)] = 0.3

    @model_validator(mode="after")
    def validate_total(self) -> "FameRatingConfig":
        total = self.views_weight + self.likes_weight + self.matches_weight
        if abs(total - 1.0) > 1e-9:
            raise ValueError("Fame rating weights must sum to 1")
        return self


class Settings(BaseModel):
    """Domain settings of the dating core.

    Attributes:
        scoring: Compatibility score weights
        fame: Fame rating thresholds and weights
        search_default_limit: Page size used when a search gives none
        log_level: Level for the application logger
    """

    model_config = ConfigDict(frozen=True)

    scoring: ScoringWeights = Field(default_factory=ScoringWeights)
    fame: FameRatingConfig = Field(default_factory=FameRatingConfig)
    search_default_limit: Annotated[int, Field(ge=1, le=100)] = 20
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, keeping defaults for unset ones."""
        scoring = {
            key: environ[name]
            for key, name in (
                ("fame", "SCORE_WEIGHT_FAME"),
                ("tags", "SCORE_WEIGHT_TAGS"),
                ("proximity", "SCORE_WEIGHT_PROXIMITY"),
                ("max_distance_km", "SCORE_MAX_DISTANCE_KM"),
            )
            if name in environ
        }
        fame = {
            key: environ[name]
            for key, name in (
                ("views_threshold", "FAME_VIEWS_THRESHOLD"),
                ("likes_threshold", "FAME_LIKES_THRESHOLD"),
                ("matches_threshold", "FAME_MATCHES_THRESHOLD"),
                ("views_weight", "FAME_WEIGHT_VIEWS"),
                ("likes_weight", "FAME_WEIGHT_LIKES"),
                ("matches_weight", "FAME_WEIGHT_MATCHES"),
            )
            if name in environ
        }
        return cls(
            scoring=ScoringWeights(**scoring),
            fame=FameRatingConfig(**fame),
            search_default_limit=environ.get("SEARCH_DEFAULT_LIMIT", 20),
            log_level=environ.get("LOG_LEVEL", "INFO"),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
