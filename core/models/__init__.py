"""Core domain models."""

from core.models.invoice import (
    CompanySnapshot,
    Invoice,
    InvoiceCreate,
    InvoiceDraft,
    InvoiceFilter,
    InvoiceStatus,
    InvoiceSummary,
    InvoiceTransition,
    LineItem,
    LineItemInput,
    SendResult,
)
from core.models.income import IncomeCategory, IncomeEntry, IncomeEntryCreate
from core.models.profile import CompanyProfile, CompanyProfileUpdate
from core.models.email_log import EmailLog, EmailLogCreate, EmailLogStatus
from core.models.contract import ContractDocument

__all__ = [
    # Invoice
    "Invoice", "InvoiceCreate", "InvoiceDraft", "InvoiceFilter", "InvoiceStatus",
    "InvoiceSummary", "InvoiceTransition", "LineItem", "LineItemInput",
    "CompanySnapshot", "SendResult",
    # Income
    "IncomeEntry", "IncomeEntryCreate", "IncomeCategory",
    # Profile
    "CompanyProfile", "CompanyProfileUpdate",
    # EmailLog
    "EmailLog", "EmailLogCreate", "EmailLogStatus",
    # Contract
    "ContractDocument",
]
