"""Invoice domain models.

Money is held as Decimal and quantized to cents with half-up rounding.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    PAID = "paid"
    # Legacy alias of DRAFT. Read from old rows, never assigned.
    PENDING = "pending"

    @property
    def rank(self) -> int:
        """Position in the forward-only lifecycle."""
        return _STATUS_RANK[self]

    def effective(self) -> "InvoiceStatus":
        """Collapse the legacy alias onto the status it stands for."""
        return InvoiceStatus.DRAFT if self is InvoiceStatus.PENDING else self


_STATUS_RANK = {
    InvoiceStatus.DRAFT: 0,
    InvoiceStatus.PENDING: 0,
    InvoiceStatus.SENT: 1,
    InvoiceStatus.VIEWED: 2,
    InvoiceStatus.PAID: 3,
}


class InvoiceFilter(str, Enum):
    """List filter. PENDING means anything not yet paid."""

    ALL = "all"
    PENDING = "pending"
    PAID = "paid"


class LineItemInput(BaseModel):
    """A line item as entered. Amount is derived, never accepted."""

    description: str = ""
    quantity: Decimal = Field(Decimal("1"), gt=0)
    rate: Decimal = Field(Decimal("0"), ge=0)


class LineItem(BaseModel):
    """A priced line item as stored on an invoice."""

    description: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal


class CompanySnapshot(BaseModel):
    """Company details copied onto an invoice when it is created."""

    company_name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    brand_color: str = "#2563eb"


class InvoiceDraft(BaseModel):
    """
    Invoice input from the user.

    Required fields are checked by the workflow, which reports which one
    is missing.
    """

    client_name: str = ""
    client_email: str = ""
    client_address: str | None = Field(None, max_length=1000)
    issue_date: date | None = None
    due_date: date | None = None
    items: list[LineItemInput] = Field(default_factory=list)
    notes: str | None = Field(None, max_length=10000)
    terms: str | None = Field(None, max_length=10000)
    tax_rate: Decimal | None = Field(None, ge=0, le=100, decimal_places=2)


class InvoiceCreate(BaseModel):
    """Fully priced invoice ready to persist."""

    invoice_number: str
    client_name: str
    client_email: str
    client_address: str | None
    issue_date: date
    due_date: date
    items: list[LineItem]
    subtotal: Decimal
    tax_rate: Decimal
    tax: Decimal
    total: Decimal
    notes: str | None
    terms: str | None
    company_profile: CompanySnapshot
    status: InvoiceStatus = InvoiceStatus.DRAFT


class InvoiceTransition(BaseModel):
    """Fields written together when an invoice changes status."""

    status: InvoiceStatus
    sent_at: datetime | None = None
    viewed_at: datetime | None = None
    paid_at: datetime | None = None
    payment_link: str | None = None


class Invoice(BaseModel):
    """Full invoice entity as stored."""

    id: UUID
    user_id: UUID
    invoice_number: str
    client_name: str
    client_email: str
    client_address: str | None
    issue_date: date
    due_date: date
    items: list[LineItem]
    subtotal: Decimal
    tax_rate: Decimal
    tax: Decimal
    total: Decimal
    notes: str | None
    terms: str | None
    status: InvoiceStatus
    payment_link: str | None = None
    company_profile: CompanySnapshot
    created_at: datetime
    updated_at: datetime
    sent_at: datetime | None = None
    viewed_at: datetime | None = None
    paid_at: datetime | None = None

    model_config = {"from_attributes": True}

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    @property
    def total_display(self) -> str:
        """Total as a plain two-decimal string."""
        return f"{self.total:.2f}"


class InvoiceSummary(BaseModel):
    """Counts and outstanding/settled totals across a user's invoices."""

    total_count: int
    pending_count: int
    paid_count: int
    total_pending: Decimal
    total_paid: Decimal


class SendResult(BaseModel):
    """Outcome of a successful transmission."""

    invoice: Invoice
    email_id: str
    payment_link: str
    preview: bool = False
