import logging
import math

from neo4j import ManagedTransaction
from pydantic import UUID4

from app.config import FameRatingConfig
from app.models.profile import Profile
from app.repositories.base import ProfileStore

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class FameRatingCalculator:
    """Derives a 0-100 popularity rating from a profile's counters.

    Each counter is scaled against its threshold and capped at 100 points,
    then the three scaled values are blended with the configured weights.
    """

    def __init__(self, config: FameRatingConfig | None = None) -> None:
        self.config = config or FameRatingConfig()

    @staticmethod
    def _normalize(count: int, threshold: int) -> float:
        return min(100.0, count / threshold * 100)

    def recompute(self, profile: Profile) -> int:
        """Compute the fame rating of a profile.

        Args:
            profile: Profile whose counters are used

        Returns:
            Rating rounded half up and clamped to [0, 100]
        """
        config = self.config
        rating = (
            config.views_weight
            * self._normalize(profile.views_count, config.views_threshold)
            + config.likes_weight
            * self._normalize(profile.likes_count, config.likes_threshold)
            + config.matches_weight
            * self._normalize(profile.matches_count, config.matches_threshold)
        )
        return max(0, min(100, round_half_up(rating)))


class FameRatingUpdater:
    """Refreshes stored fame ratings after the counters they depend on change.

    A refresh runs in its own write transaction once the triggering operation
    has committed, so a failing refresh never undoes that operation.
    """

    def __init__(
        self,
        database,
        profiles: ProfileStore,
        calculator: FameRatingCalculator | None = None,
    ) -> None:
        self.database = database
        self.profiles = profiles
        self.calculator = calculator or FameRatingCalculator()

    def _refresh(self, tx: ManagedTransaction, user_id: UUID4) -> int | None:
        profile = self.profiles.get_profile(tx, user_id)
        if profile is None:
            return None
        rating = self.calculator.recompute(profile)
        self.profiles.set_fame_rating(tx, user_id, rating)
        return rating

    def refresh(self, user_id: UUID4) -> int | None:
        """Recompute and store the fame rating of a user.

        Args:
            user_id: User whose rating to refresh

        Returns:
            The new rating, or None if the user has no profile or the refresh failed
        """
        try:
            return self.database.execute_write(self._refresh, user_id)
        except Exception:
            logger.exception("Failed to refresh fame rating for user %s", user_id)
            return None

    def refresh_many(self, *user_ids: UUID4) -> None:
        for user_id in user_ids:
            self.refresh(user_id)
