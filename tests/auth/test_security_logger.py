"""Tests for SecurityLogger - append-only security event trail."""

from unittest.mock import Mock
from uuid import uuid4

import pytest
from psycopg2.extras import Json

from auth.security_logger import SecurityEvent, SecurityLogger
from clients.postgres_client import PostgresClient


@pytest.fixture
def postgres():
    return Mock(spec=PostgresClient)


class TestLog:

    def test_inserts_event(self, postgres):
        user_id = uuid4()
        SecurityLogger(postgres).log(
            SecurityEvent.LOGIN_FAILED,
            email="user@example.com",
            user_id=user_id,
            ip_address="1.2.3.4",
            details={"reason": "wrong_password"},
        )

        query, params = postgres.execute.call_args.args
        assert "INSERT INTO security_events" in query
        assert params[:4] == ("login_failed", "user@example.com", user_id, "1.2.3.4")
        assert isinstance(params[5], Json)

    def test_no_details_stores_null(self, postgres):
        SecurityLogger(postgres).log(SecurityEvent.SESSION_REVOKED)
        assert postgres.execute.call_args.args[1][5] is None

    def test_mirrors_to_application_log(self, postgres, caplog):
        import logging

        with caplog.at_level(logging.INFO, logger="auth.security_logger"):
            SecurityLogger(postgres).log(SecurityEvent.USER_REGISTERED, email="new@example.com")
        assert "user_registered" in caplog.text


class TestGetRecentEvents:

    def test_unfiltered(self, postgres):
        SecurityLogger(postgres).get_recent_events()
        query, params = postgres.execute.call_args.args
        assert "WHERE TRUE" in query
        assert params == (100,)

    def test_filters_combine(self, postgres):
        SecurityLogger(postgres).get_recent_events(
            email="user@example.com", event_type=SecurityEvent.RATE_LIMITED, limit=5
        )
        query, params = postgres.execute.call_args.args
        assert "email = %s AND event_type = %s" in query
        assert params == ("user@example.com", "rate_limited", 5)
