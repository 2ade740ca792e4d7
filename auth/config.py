"""Authentication configuration."""

from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """
    Authentication settings. Durations use the unit in the field name.
    """

    session_expiry_hours: int = Field(
        default=24 * 14,
        description="Session lifetime; each authenticated request slides it forward",
        ge=1,
        le=2160,
    )

    login_rate_limit_attempts: int = Field(
        default=5,
        description="Failed logins allowed per email per window",
        ge=1,
        le=20,
    )
    login_rate_limit_window_minutes: int = Field(
        default=15,
        description="Login throttling window; every attempt restarts it",
        ge=1,
        le=60,
    )

    password_reset_expiry_minutes: int = Field(
        default=30,
        description="How long a password reset link stays valid",
        ge=5,
        le=1440,
    )
    password_min_length: int = Field(default=8, ge=6, le=128)

    cookie_secure: bool = Field(default=True, description="Send the session cookie over HTTPS only")

    app_base_url: str = Field(
        default="http://localhost:8000",
        description="Origin for password reset links",
    )
    app_name: str = Field(default="IndiePilot", description="Application name for emails")
    sender_address: str = Field(
        default="IndiePilot <support@indiepilot.io>",
        description="From header for account emails",
    )
