import logging
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from app.config import FameRatingConfig
from app.models.profile import Profile
from app.services.fame import FameRatingCalculator, FameRatingUpdater, round_half_up
from tests.fakes import FakeDatabase, FakeProfileStore, seed_user


def profile_with(views: int = 0, likes: int = 0, matches: int = 0) -> Profile:
    return Profile(
        user_id=uuid4(), views_count=views, likes_count=likes, matches_count=matches
    )


@pytest.mark.unit
class TestFameRatingCalculator:
    def test_worked_example(self):
        calculator = FameRatingCalculator()

        rating = calculator.recompute(profile_with(views=200, likes=25, matches=10))

        assert rating == 65

    def test_new_profile_has_zero_rating(self):
        assert FameRatingCalculator().recompute(profile_with()) == 0

    def test_counters_are_capped_at_threshold(self):
        calculator = FameRatingCalculator()

        rating = calculator.recompute(profile_with(views=10_000, likes=500, matches=99))

        assert rating == 100

    def test_rounds_half_up(self):
        # 0.3 * 5 = 1.5 points from views alone
        assert FameRatingCalculator().recompute(profile_with(views=5)) == 2
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2

    def test_uses_configured_thresholds(self):
        calculator = FameRatingCalculator(
            FameRatingConfig(
                views_threshold=10,
                likes_threshold=10,
                matches_threshold=10,
                views_weight=0.0,
                likes_weight=1.0,
                matches_weight=0.0,
            )
        )

        assert calculator.recompute(profile_with(views=10, likes=5)) == 50


@pytest.mark.unit
class TestFameRatingUpdater:
    def test_refresh_stores_rating(self, database: FakeDatabase):
        user = seed_user(
            database,
            "famous",
            profile={"views_count": 200, "likes_count": 25, "matches_count": 10},
        )
        updater = FameRatingUpdater(database, FakeProfileStore())

        rating = updater.refresh(user.user_id)

        assert rating == 65
        assert database.state.profiles[user.user_id].fame_rating == 65

    def test_refresh_without_profile_is_noop(self, database: FakeDatabase):
        user = seed_user(database, "nobody")
        updater = FameRatingUpdater(database, FakeProfileStore())

        assert updater.refresh(user.user_id) is None
        assert user.user_id not in database.state.profiles

    def test_refresh_failure_is_logged_and_swallowed(self, caplog):
        database = MagicMock()
        database.execute_write.side_effect = RuntimeError("database unavailable")
        updater = FameRatingUpdater(database, FakeProfileStore())

        with caplog.at_level(logging.ERROR, logger="app.services.fame"):
            result = updater.refresh(uuid4())

        assert result is None
        assert "Failed to refresh fame rating" in caplog.text
