"""Tests for auth/types.py - Pydantic models for auth domain."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError

from auth.types import Credentials, PasswordResetConfirm, User, UserRole


class TestUserValidation:

    def test_rejects_invalid_email(self):
        with pytest.raises(ValidationError):
            User(id=uuid4(), email="not-an-email", created_at=datetime.now(timezone.utc))

    def test_defaults(self):
        user = User(id=uuid4(), email="user@example.com", created_at=datetime.now(timezone.utc))
        assert user.role == UserRole.USER
        assert user.is_active is True
        assert user.last_login_at is None


class TestRequestBodies:

    def test_credentials_require_password(self):
        with pytest.raises(ValidationError):
            Credentials(email="user@example.com", password="")

    def test_reset_confirm_requires_token(self):
        with pytest.raises(ValidationError):
            PasswordResetConfirm(token="", new_password="long enough")
