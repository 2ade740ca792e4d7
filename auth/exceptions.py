"""Typed exceptions for auth failures."""


class AuthError(Exception):
    """Base class for authentication errors."""


class InvalidCredentialsError(AuthError):
    """
    Email/password pair did not match.

    Deliberately says nothing about which half was wrong.
    """


class EmailAlreadyRegisteredError(AuthError):
    """Registration attempted with an email that already has an account."""


class WeakPasswordError(AuthError):
    """Password does not meet the minimum requirements."""


class InvalidTokenError(AuthError):
    """Password reset token is unknown, expired or already used."""


class RateLimitedError(AuthError):
    """Too many attempts. Client should wait before retrying."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"Rate limited. Retry after {retry_after_seconds} seconds.")


class SessionExpiredError(AuthError):
    """Session is unknown or expired; the user must log in again."""


class UserInactiveError(AuthError):
    """Account is deactivated. Login not permitted."""
