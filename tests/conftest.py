"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import fakeredis
import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


# Test environment that overrides every setting read from the environment
TEST_ENV = {
    "SEARCH_ENGINE_STORAGE_BACKEND": "sqlite",
    "SEARCH_ENGINE_SQLITE_PATH": "storage.db",
    "SEARCH_ENGINE_REDIS_URL": "redis://localhost:6379/0",
    "SEARCH_ENGINE_REDIS_KEY_PREFIX": "test:document:",
    "SEARCH_ENGINE_POOL_MAX_CONNECTIONS": "4",
    "SEARCH_ENGINE_POOL_TIMEOUT_SECONDS": "5",
    "SEARCH_ENGINE_DEFAULT_RESULT_LIMIT": "10",
    "SEARCH_ENGINE_DESCRIPTION_SEGMENT_COUNT": "3",
    "SEARCH_ENGINE_CORRUPT_RECORD_POLICY": "skip",
    "SEARCH_ENGINE_LOG_LEVEL": "info",
    "SEARCH_ENGINE_LOG_JSON": "true",
    "SEARCH_ENGINE_OTLP_ENDPOINT": "",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value

from search_engine.config import Settings
from search_engine.search.redis_storage import RedisDocumentStore
from search_engine.search.sqlite_storage import SqliteDocumentStore


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset environment variables before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(sqlite_path=tmp_path / "storage.db")


@pytest.fixture
def sqlite_store(tmp_path):
    store = SqliteDocumentStore(tmp_path / "storage.db", max_connections=4, pool_timeout=5.0)
    yield store
    store.close()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis()


@pytest.fixture
def redis_store(fake_redis):
    store = RedisDocumentStore(fake_redis, key_prefix="test:document:")
    yield store
    store.close()


@pytest.fixture(params=["sqlite", "redis"])
def any_store(request):
    """Run a test once per backend."""
    return request.getfixturevalue(f"{request.param}_store")
