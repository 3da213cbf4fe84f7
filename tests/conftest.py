"""Pytest fixtures for testing"""

import httpx
import pytest
from fastapi.testclient import TestClient

from factories import ANON_KEY, BACKEND_URL, TODAY, USER_ID, FakeBackend
from outbehaving.api.dependencies import CurrentUser, get_current_user
from outbehaving.api.main import create_app
from outbehaving.config import Settings
from outbehaving.infrastructure.clients.base import BackendConfig
from outbehaving.infrastructure.clients.database import DatabaseClient
from outbehaving.infrastructure.clients.storage import StorageClient
from outbehaving.state.app import AppState
from outbehaving.state.goals import GoalsState


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        supabase_url=BACKEND_URL,
        supabase_anon_key=ANON_KEY,
        webhook_verify_token="abc123",
        log_level="WARNING",
    )


@pytest.fixture
def backend_config(backend: FakeBackend) -> BackendConfig:
    return BackendConfig(url=BACKEND_URL, anon_key=ANON_KEY, transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def db(backend_config: BackendConfig) -> DatabaseClient:
    return DatabaseClient(backend_config, access_token="user-token")


@pytest.fixture
def storage(backend_config: BackendConfig) -> StorageClient:
    return StorageClient(backend_config, bucket="avatars", access_token="user-token")


@pytest.fixture
def app_state() -> AppState:
    """State with a pinned calendar so days_remaining is deterministic"""
    return AppState(goals=GoalsState(today=lambda: TODAY))


@pytest.fixture
def app(test_settings: Settings, backend_config: BackendConfig):
    return create_app(settings=test_settings, backend_config=backend_config)


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client against the fake backend"""
    return TestClient(app)


@pytest.fixture
def auth_client(app) -> TestClient:
    """Test client whose caller is already authenticated as USER_ID"""
    app.dependency_overrides[get_current_user] = lambda: CurrentUser(
        id=USER_ID, access_token="user-token", email="jo@example.com"
    )
    return TestClient(app)
