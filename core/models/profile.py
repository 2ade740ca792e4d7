"""Company profile domain models."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, EmailStr

from core.models.invoice import CompanySnapshot


class CompanyProfileUpdate(BaseModel):
    """Company settings as saved by the user."""

    company_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    address: str | None = Field(None, max_length=1000)
    brand_color: str = Field("#2563eb", pattern="^#[0-9a-fA-F]{6}$")
    tax_percent: Decimal = Field(Decimal("0"), ge=0, le=100, decimal_places=2)
    invoice_prefix: str = Field("INV", min_length=1, max_length=20, pattern="^[A-Za-z0-9-]+$")
    default_notes: str | None = Field(None, max_length=10000)
    default_terms: str | None = Field(None, max_length=10000)


class CompanyProfile(BaseModel):
    """Company profile entity as stored."""

    user_id: UUID
    company_name: str
    email: str | None
    phone: str | None
    address: str | None
    brand_color: str
    tax_percent: Decimal
    invoice_prefix: str
    default_notes: str | None
    default_terms: str | None
    updated_at: datetime

    model_config = {"from_attributes": True}

    def snapshot(self) -> CompanySnapshot:
        """Copy the fields an invoice carries."""
        return CompanySnapshot(
            company_name=self.company_name,
            email=self.email,
            phone=self.phone,
            address=self.address,
            brand_color=self.brand_color,
        )
