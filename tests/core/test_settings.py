"""Tests for LearnLensSettings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from learnlens.core.settings import LearnLensSettings


class TestDefaults:
    def test_orchestration_defaults(self):
        settings = LearnLensSettings(_env_file=None)
        assert settings.specialist_timeout_s == 30.0
        assert settings.max_attempts == 3
        assert settings.initial_delay_s == 1.0
        assert settings.max_delay_s == 5.0
        assert settings.retry_jitter is False
        assert settings.default_module_id == "UnknownModule"
        assert settings.default_cohort == "DefaultCohort"

    def test_retry_config(self):
        config = LearnLensSettings(max_attempts=5, _env_file=None).retry_config()
        assert config.max_attempts == 5
        assert config.initial_delay_s == 1.0
        assert config.max_delay_s == 5.0


class TestEnvironment:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("LEARNLENS_MAX_ATTEMPTS", "4")
        monkeypatch.setenv("LEARNLENS_SPECIALIST_TIMEOUT_S", "2.5")
        settings = LearnLensSettings(_env_file=None)
        assert settings.max_attempts == 4
        assert settings.specialist_timeout_s == 2.5

    def test_specialist_urls_from_json(self, monkeypatch):
        monkeypatch.setenv("LEARNLENS_SPECIALIST_URLS", '{"rating": "http://scoring/rating"}')
        settings = LearnLensSettings(_env_file=None)
        assert settings.specialist_urls == {"rating": "http://scoring/rating"}


class TestValidation:
    def test_rejects_zero_attempts(self):
        with pytest.raises(PydanticValidationError):
            LearnLensSettings(max_attempts=0, _env_file=None)

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(PydanticValidationError):
            LearnLensSettings(specialist_timeout_s=0, _env_file=None)

    def test_rejects_initial_delay_above_cap(self):
        with pytest.raises(PydanticValidationError, match="must not exceed"):
            LearnLensSettings(initial_delay_s=10, max_delay_s=5, _env_file=None)
