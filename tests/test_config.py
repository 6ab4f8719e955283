import pytest
from pydantic import ValidationError

from app.config import FameRatingConfig, ScoringWeights, Settings


@pytest.mark.unit
class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("SCORE_WEIGHT_FAME", "SEARCH_DEFAULT_LIMIT", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.search_default_limit == 20
        assert settings.fame.likes_threshold == 50
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SEARCH_DEFAULT_LIMIT", "50")
        monkeypatch.setenv("FAME_VIEWS_THRESHOLD", "200")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = Settings.from_env()

        assert settings.search_default_limit == 50
        assert settings.fame.views_threshold == 200
        assert settings.log_level == "DEBUG"

    def test_invalid_weights_fail_fast(self, monkeypatch):
        monkeypatch.setenv("FAME_WEIGHT_VIEWS", "0.9")

        with pytest.raises(ValidationError):
            Settings.from_env()

    def test_models_validate_directly(self):
        with pytest.raises(ValidationError):
            ScoringWeights(fame=0.5, tags=0.5, proximity=0.5)
        with pytest.raises(ValidationError):
            FameRatingConfig(likes_threshold=0)
