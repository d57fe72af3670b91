"""Configuration for pytest."""
from datetime import date
from unittest.mock import MagicMock, Mock

import pytest

from app.models.domain import Identity
from app.repositories.local_progress import LocalProgressStore
from app.repositories.remote_progress import RemoteProgressStore
from app.services.progress_service import ProgressService


@pytest.fixture
def mock_settings():
    """Mock application settings for testing."""
    settings = Mock()
    settings.app_name = "Test Progress API"
    settings.debug = True
    settings.cache_enabled = False
    settings.redis_url = "redis://localhost:6379/0"
    settings.local_cache_prefix = "test"
    settings.remote_fetch_timeout_seconds = 0.05
    return settings


@pytest.fixture
def guest():
    return Identity(user_id="guest_a1b2c3d4e5f6")


@pytest.fixture
def reader():
    return Identity(user_id="8f14e45f-ceea-467a-9575-2b5b4c2e1d01")


@pytest.fixture
def local_store():
    """Local store running on its in-memory fallback only."""
    return LocalProgressStore(None, prefix="test")


@pytest.fixture
def remote_store():
    return MagicMock(spec=RemoteProgressStore)


@pytest.fixture
def service(local_store, remote_store):
    return ProgressService(local_store, remote_store, fetch_timeout=0.05)


@pytest.fixture
def fixed_today():
    return date(2026, 3, 10)
