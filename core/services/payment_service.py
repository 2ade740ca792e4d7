"""
Mock payment page backend.

Accepts card details, checks them for presence and the amount against the
invoice total, then settles through the invoice workflow as the invoice's
owner. No card data is stored or forwarded anywhere.
"""

import logging
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from core.exceptions import PaymentRejectedError
from core.models import Invoice, InvoiceStatus
from core.money import to_cents
from core.repositories import InvoiceRepository
from core.services.invoice_service import InvoiceService
from utils.user_context import user_context

logger = logging.getLogger(__name__)


class PublicInvoice(BaseModel):
    """What the payment page may show to anyone holding the link."""

    id: UUID
    invoice_number: str
    company_name: str
    brand_color: str
    client_name: str
    total: Decimal
    due_date: str
    status: InvoiceStatus


class CardPayment(BaseModel):
    card_holder: str = ""
    card_number: str = ""
    expiry: str = ""
    cvv: str = ""
    amount: Decimal | None = None


class PaymentReceipt(BaseModel):
    invoice_id: UUID
    invoice_number: str
    amount: Decimal
    status: InvoiceStatus


def _public_view(invoice: Invoice) -> PublicInvoice:
    return PublicInvoice(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        company_name=invoice.company_profile.company_name,
        brand_color=invoice.company_profile.brand_color,
        client_name=invoice.client_name,
        total=invoice.total,
        due_date=invoice.due_date.isoformat(),
        status=invoice.status,
    )


class PaymentService:
    def __init__(self, invoices: InvoiceRepository, invoice_service: InvoiceService):
        self.invoices = invoices
        self.invoice_service = invoice_service

    def _load(self, invoice_id: UUID) -> Invoice:
        owner_id = self.invoices.find_owner(invoice_id)
        if owner_id is None:
            raise ValueError(f"Invoice {invoice_id} not found")
        invoice = self.invoices.get(owner_id, invoice_id)
        if invoice is None:
            raise ValueError(f"Invoice {invoice_id} not found")
        return invoice

    def get_public_invoice(self, invoice_id: UUID) -> PublicInvoice:
        return _public_view(self._load(invoice_id))

    def pay(self, invoice_id: UUID, payment: CardPayment) -> PaymentReceipt:
        """
        Raises:
            ValueError: Invoice not found
            PaymentRejectedError: Missing card field, wrong amount or
                invoice already paid
        """
        invoice = self._load(invoice_id)

        missing = [
            name for name in ("card_holder", "card_number", "expiry", "cvv")
            if not getattr(payment, name).strip()
        ]
        if missing:
            raise PaymentRejectedError(f"Missing payment details: {', '.join(missing)}")
        if invoice.is_paid:
            raise PaymentRejectedError(f"Invoice {invoice.invoice_number} is already paid")
        if payment.amount is None or to_cents(payment.amount) != invoice.total:
            raise PaymentRejectedError(f"Payment amount must equal the invoice total of {invoice.total_display}")

        with user_context(invoice.user_id):
            paid = self.invoice_service.mark_paid(invoice.id)

        logger.info(f"Mock payment accepted for invoice {paid.invoice_number}")
        return PaymentReceipt(
            invoice_id=paid.id,
            invoice_number=paid.invoice_number,
            amount=paid.total,
            status=paid.status,
        )
