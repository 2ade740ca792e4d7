"""Authentication service: password accounts, sessions and password reset."""

import logging
import secrets
from uuid import UUID

from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    InvalidTokenError,
    RateLimitedError,
    UserInactiveError,
)
from auth.passwords import check_strength, hash_password, verify_password
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.session import SessionManager
from auth.types import AuthenticatedUser, Session, User
from clients.email_client import EmailApiClient
from clients.valkey_client import ValkeyClient

logger = logging.getLogger(__name__)


class AuthService:
    """
    Orchestrates registration, login and password reset.

    Reset tokens live in Valkey under RESET_KEY_PREFIX and are consumed
    with a single GETDEL, so each link works once.
    """

    RESET_KEY_PREFIX = "indiepilot:password_reset:"

    def __init__(
        self,
        config: AuthConfig,
        auth_db: AuthDatabase,
        session_manager: SessionManager,
        rate_limiter: RateLimiter,
        valkey: ValkeyClient,
        security_logger: SecurityLogger,
        email_client: EmailApiClient | None = None,
    ):
        self._config = config
        self._auth_db = auth_db
        self._session_manager = session_manager
        self._rate_limiter = rate_limiter
        self._valkey = valkey
        self._security_logger = security_logger
        self._email_client = email_client

    def register(self, email: str, password: str, ip_address: str | None = None) -> AuthenticatedUser:
        """
        Create an account and log it in.

        Raises:
            WeakPasswordError: Password too short
            EmailAlreadyRegisteredError: Email already has an account
        """
        email = email.strip().lower()
        check_strength(password, self._config.password_min_length)

        user = self._auth_db.create_user(email, hash_password(password))
        if user is None:
            self._security_logger.log(
                SecurityEvent.REGISTRATION_REJECTED,
                email=email,
                ip_address=ip_address,
                details={"reason": "email_taken"},
            )
            raise EmailAlreadyRegisteredError(f"An account already exists for {email}")

        self._security_logger.log(SecurityEvent.USER_REGISTERED, email=email, user_id=user.id, ip_address=ip_address)
        session = self._session_manager.create_session(user.id, user.role)
        return AuthenticatedUser(user=user, session=session)

    def login(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthenticatedUser:
        """
        Verify credentials and open a session.

        Raises:
            RateLimitedError: Too many attempts for this email
            InvalidCredentialsError: Unknown email or wrong password
            UserInactiveError: Account deactivated
        """
        email = email.strip().lower()
        try:
            self._rate_limiter.check_rate_limit(email)
        except RateLimitedError:
            self._security_logger.log(SecurityEvent.RATE_LIMITED, email=email, ip_address=ip_address)
            raise

        found = self._auth_db.get_credentials(email)
        if found is None or not verify_password(password, found[1]):
            self._security_logger.log(
                SecurityEvent.LOGIN_FAILED,
                email=email,
                ip_address=ip_address,
                user_agent=user_agent,
                details={"reason": "unknown_email" if found is None else "wrong_password"},
            )
            raise InvalidCredentialsError("Invalid email or password")

        user = found[0]
        if not user.is_active:
            self._security_logger.log(
                SecurityEvent.LOGIN_FAILED,
                email=email,
                user_id=user.id,
                ip_address=ip_address,
                details={"reason": "user_inactive"},
            )
            raise UserInactiveError("User account is deactivated")

        session = self._session_manager.create_session(user.id, user.role)
        self._auth_db.update_last_login(user.id)
        self._rate_limiter.reset_rate_limit(email)
        self._security_logger.log(
            SecurityEvent.LOGIN_SUCCEEDED,
            email=email,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return AuthenticatedUser(user=user, session=session)

    def logout(self, session_token: str, ip_address: str | None = None) -> None:
        """Revoke the session. Unknown tokens are fine."""
        self._session_manager.revoke_session(session_token)
        self._security_logger.log(SecurityEvent.SESSION_REVOKED, ip_address=ip_address)

    def validate_session(self, token: str) -> Session:
        return self._session_manager.validate_session(token)

    def get_user(self, user_id: UUID) -> User | None:
        return self._auth_db.get_user_by_id(user_id)

    def request_password_reset(self, email: str, ip_address: str | None = None) -> None:
        """
        Email a single-use reset link if the account exists.

        Unknown emails return silently so the endpoint cannot be used to
        probe for accounts.

        Raises:
            EmailGatewayError: Reset email could not be sent
        """
        email = email.strip().lower()
        user = self._auth_db.get_user_by_email(email)
        if user is None:
            self._security_logger.log(
                SecurityEvent.PASSWORD_RESET_FAILED,
                email=email,
                ip_address=ip_address,
                details={"reason": "unknown_email"},
            )
            return

        token = secrets.token_urlsafe(32)
        self._valkey.set(
            f"{self.RESET_KEY_PREFIX}{token}",
            str(user.id),
            expire_seconds=self._config.password_reset_expiry_minutes * 60,
        )
        link = f"{self._config.app_base_url.rstrip('/')}/reset-password?token={token}"

        if self._email_client is None:
            logger.warning(f"Email disabled; password reset for {email} was not delivered")
        else:
            self._email_client.send_text(
                sender=self._config.sender_address,
                to=email,
                subject=f"Reset your {self._config.app_name} password",
                body=(
                    f"Someone asked to reset the password for {email}.\n\n"
                    f"Use this link within {self._config.password_reset_expiry_minutes} minutes:\n{link}\n\n"
                    "If this wasn't you, ignore this email."
                ),
            )

        self._security_logger.log(
            SecurityEvent.PASSWORD_RESET_REQUESTED, email=email, user_id=user.id, ip_address=ip_address
        )

    def reset_password(self, token: str, new_password: str, ip_address: str | None = None) -> None:
        """
        Raises:
            WeakPasswordError: New password too short
            InvalidTokenError: Token unknown, expired or already used
        """
        check_strength(new_password, self._config.password_min_length)

        user_id = self._valkey.pop(f"{self.RESET_KEY_PREFIX}{token}")
        if user_id is None:
            self._security_logger.log(
                SecurityEvent.PASSWORD_RESET_FAILED, ip_address=ip_address, details={"reason": "invalid_token"}
            )
            raise InvalidTokenError("Invalid or expired reset token")

        if not self._auth_db.update_password(UUID(user_id), hash_password(new_password)):
            raise InvalidTokenError("Invalid or expired reset token")

        self._security_logger.log(
            SecurityEvent.PASSWORD_RESET_COMPLETED, user_id=UUID(user_id), ip_address=ip_address
        )
