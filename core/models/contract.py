"""Service agreement document model. Rendered, never stored."""

from datetime import date

from pydantic import BaseModel, Field

from utils.timezone import today_utc


class ContractDocument(BaseModel):
    """Content of a one-off service agreement."""

    contract_number: str = Field(..., min_length=1, max_length=100)
    client_name: str = Field(..., min_length=1, max_length=255)
    client_email: str | None = Field(None, max_length=255)
    client_address: str | None = Field(None, max_length=1000)
    issue_date: date = Field(default_factory=today_utc)
    scope_of_work: str = Field(..., min_length=1, max_length=20000)
    rate_label: str = Field(..., min_length=1, max_length=255)
    terms: str | None = Field(None, max_length=20000)
    notes: str | None = Field(None, max_length=10000)
