"""Income ledger domain models."""

import datetime as dt
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from utils.timezone import today_utc


class IncomeCategory(str, Enum):
    """Income entry category."""

    SERVICE = "service"
    PRODUCT = "product"
    CONSULTING = "consulting"
    OTHER = "other"


class IncomeEntryCreate(BaseModel):
    """Data required to record income."""

    amount: Decimal = Field(..., gt=0)
    description: str = Field(..., min_length=1, max_length=500)
    date: dt.date = Field(default_factory=today_utc)
    category: IncomeCategory = IncomeCategory.SERVICE
    invoice_reference: str | None = Field(None, max_length=100)


class IncomeEntry(BaseModel):
    """Ledger entry as stored. Never updated after insert."""

    id: UUID
    user_id: UUID
    amount: Decimal
    description: str
    date: dt.date
    category: IncomeCategory
    invoice_reference: str | None = None
    created_at: dt.datetime

    model_config = {"from_attributes": True}
