"""Tests for auth/config.py - Auth configuration with validation."""

import pytest
from pydantic import ValidationError

from auth.config import AuthConfig


class TestAuthConfigDefaults:

    def test_session_expiry_default(self):
        assert AuthConfig().session_expiry_hours == 336  # 14 days

    def test_rate_limit_defaults(self):
        config = AuthConfig()
        assert config.login_rate_limit_attempts == 5
        assert config.login_rate_limit_window_minutes == 15

    def test_password_defaults(self):
        config = AuthConfig()
        assert config.password_reset_expiry_minutes == 30
        assert config.password_min_length == 8
        assert config.cookie_secure is True


class TestAuthConfigValidation:

    @pytest.mark.parametrize("overrides", [
        {"session_expiry_hours": 0},
        {"session_expiry_hours": 2161},
        {"login_rate_limit_attempts": 0},
        {"login_rate_limit_window_minutes": 61},
        {"password_reset_expiry_minutes": 4},
        {"password_min_length": 5},
    ])
    def test_bounds(self, overrides):
        with pytest.raises(ValidationError):
            AuthConfig(**overrides)
