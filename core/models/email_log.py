"""Email delivery log models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class EmailLogStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    PREVIEW = "preview"


class EmailLogCreate(BaseModel):
    """One dispatch attempt for an invoice email."""

    user_id: UUID
    invoice_id: UUID
    invoice_number: str
    client_email: str
    client_name: str
    status: EmailLogStatus
    email_id: str | None = None
    error: str | None = None


class EmailLog(EmailLogCreate):
    id: UUID
    created_at: datetime

    model_config = {"from_attributes": True}
