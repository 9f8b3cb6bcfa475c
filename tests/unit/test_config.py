"""Unit tests for the config module."""

import os
from pathlib import Path

from pydantic import ValidationError
import pytest

from search_engine.config import Settings


pytestmark = pytest.mark.unit


class TestConfig:
    """Test configuration loading and validation."""

    def test_values_come_from_environment(self):
        settings = Settings()
        assert settings.storage_backend == "sqlite"
        assert settings.redis_key_prefix == "test:document:"
        assert settings.pool_max_connections == 4

    def test_defaults_without_environment(self, monkeypatch):
        for key in list(os.environ):
            if key.startswith("SEARCH_ENGINE_"):
                monkeypatch.delenv(key)
        settings = Settings(_env_file=None)
        assert settings.sqlite_path == Path("storage.db")
        assert settings.default_result_limit == 10
        assert settings.description_segment_count == 3
        assert settings.corrupt_record_policy == "skip"

    def test_backend_selected_by_environment(self, monkeypatch):
        monkeypatch.setenv("SEARCH_ENGINE_STORAGE_BACKEND", "redis")
        assert Settings().storage_backend == "redis"

    def test_unknown_backend_is_rejected(self, monkeypatch):
        monkeypatch.setenv("SEARCH_ENGINE_STORAGE_BACKEND", "postgres")
        with pytest.raises(ValidationError):
            Settings()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"pool_max_connections": 0},
            {"default_result_limit": 0},
            {"pool_timeout_seconds": 0},
            {"redis_key_prefix": ""},
            {"corrupt_record_policy": "ignore"},
            {"log_level": "verbose"},
        ],
    )
    def test_invalid_values_are_rejected(self, overrides):
        with pytest.raises(ValidationError):
            Settings(**overrides)

    def test_observability_export_toggle(self):
        assert Settings().is_observability_export_enabled() is False
        assert Settings(otlp_endpoint="http://collector:4318").is_observability_export_enabled() is True
