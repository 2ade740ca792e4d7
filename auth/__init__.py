"""Authentication and authorization modules."""

from auth.exceptions import (
    AuthError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    InvalidTokenError,
    RateLimitedError,
    SessionExpiredError,
    UserInactiveError,
    WeakPasswordError,
)
from auth.types import (
    AuthenticatedUser,
    Credentials,
    PasswordResetConfirm,
    PasswordResetRequest,
    Session,
    User,
    UserRole,
)
from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.session import SessionManager
from auth.service import AuthService
from auth.security_middleware import AuthMiddleware
from auth.api import create_auth_router
