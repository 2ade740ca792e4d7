"""Application configuration for invoicing and delivery."""

import os
from pathlib import Path

from pydantic import BaseModel, Field


class AppConfig(BaseModel):
    """
    Invoice workflow settings.

    Built once at startup and injected into the services and the
    notification gateway. Nothing reads these values from globals.
    """

    app_base_url: str = Field(
        default="http://localhost:8000",
        description="Origin used for payment links",
    )
    use_real_email: bool = Field(
        default=False,
        description="Dispatch through the email API; when false, log a preview instead",
    )
    sender_domain: str = Field(
        default="indiepilot.io",
        description="Domain of the invoices@ sender address",
    )
    documents_dir: Path = Field(
        default=Path("documents"),
        description="Root directory for local PDF copies, one folder per user",
    )
    default_terms: str = Field(default="Payment due within 30 days")
    default_due_days: int = Field(default=30, ge=0, le=365)
    recent_income_limit: int = Field(default=10, ge=1, le=100)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Overlay INDIEPILOT_* environment variables on the defaults."""
        overrides = {}
        env_map = {
            "app_base_url": "INDIEPILOT_APP_BASE_URL",
            "use_real_email": "INDIEPILOT_USE_REAL_EMAIL",
            "sender_domain": "INDIEPILOT_SENDER_DOMAIN",
            "documents_dir": "INDIEPILOT_DOCUMENTS_DIR",
        }
        for field_name, env_name in env_map.items():
            value = os.getenv(env_name)
            if value is not None:
                overrides[field_name] = value
        return cls(**overrides)
