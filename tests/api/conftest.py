"""API test fixtures: the assembled app over in-memory stores, authenticated as the test user."""

from datetime import timedelta
from unittest.mock import Mock

import pytest
from starlette.testclient import TestClient

from auth.config import AuthConfig
from auth.service import AuthService
from auth.session import SessionManager
from auth.types import Session
from utils.timezone import now_utc


# =============================================================================
# AUTH FIXTURES
# =============================================================================


@pytest.fixture
def mock_session_manager(test_user_id):
    now = now_utc()
    mock = Mock(spec=SessionManager)
    mock.validate_session.return_value = Session(
        token="test-token",
        user_id=test_user_id,
        created_at=now,
        expires_at=now + timedelta(hours=24),
        last_activity_at=now,
    )
    return mock


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(mock_session_manager, services):
    """Production app assembly with the session store and auth service mocked."""
    from main import create_app

    return create_app(services, mock_session_manager, Mock(spec=AuthService), AuthConfig())


@pytest.fixture
def client(app):
    """Authenticated test client."""
    c = TestClient(app, raise_server_exceptions=False)
    c.cookies.set("session_token", "test-token")
    return c


@pytest.fixture
def unauthed_client(app):
    """Unauthenticated test client (no session cookie)."""
    return TestClient(app, raise_server_exceptions=False)
