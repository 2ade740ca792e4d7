"""
Invoice workflow: creation, transmission and settlement.

Statuses only move forward (draft -> sent -> viewed -> paid) and nothing
leaves paid. Each mutation is a single store write made after every
precondition and side effect it depends on has succeeded:

- create: validated and priced before a number is minted
- send: the email is accepted before status changes
- mark_paid: the ledger entry exists before status changes
"""

import logging
from datetime import timedelta
from decimal import Decimal
from urllib.parse import urlencode
from uuid import UUID

from core.audit import AuditAction, AuditLogger
from core.config import AppConfig
from core.event_bus import EventBus
from core.events import InvoiceCreated, InvoicePaid, InvoiceSent, InvoiceViewed
from core.exceptions import InvalidStatusTransitionError, InvoiceValidationError
from core.models import (
    EmailLog,
    Invoice,
    InvoiceCreate,
    InvoiceDraft,
    InvoiceFilter,
    InvoiceStatus,
    InvoiceSummary,
    InvoiceTransition,
    SendResult,
)
from core.money import compute_totals, is_billable, price_line
from core.notifications import InvoiceEmail, NotificationGateway, default_message, default_subject
from core.repositories import InvoiceRepository, ProfileRepository
from core.services.ledger_service import LedgerService
from core.services.numbering_service import InvoiceCounter
from utils.timezone import now_utc, today_utc
from utils.user_context import get_current_user_id

logger = logging.getLogger(__name__)


class InvoiceService:
    """Service for invoice operations on behalf of the current user."""

    def __init__(
        self,
        invoices: InvoiceRepository,
        profiles: ProfileRepository,
        ledger: LedgerService,
        counter: InvoiceCounter,
        gateway: NotificationGateway,
        audit: AuditLogger,
        event_bus: EventBus,
        config: AppConfig,
    ):
        self.invoices = invoices
        self.profiles = profiles
        self.ledger = ledger
        self.counter = counter
        self.gateway = gateway
        self.audit = audit
        self.event_bus = event_bus
        self.config = config

    # -- creation ---------------------------------------------------------

    def create_invoice(self, draft: InvoiceDraft) -> Invoice:
        """
        Validate, price, number and persist a new draft invoice.

        Args:
            draft: Client details and line items as entered

        Returns:
            Persisted invoice in DRAFT status

        Raises:
            InvoiceValidationError: Missing profile, client name, client
                email or billable items. Nothing is written and no number
                is consumed.
        """
        user_id = get_current_user_id()

        profile = self.profiles.get(user_id)
        if profile is None:
            raise InvoiceValidationError("company_profile", "Set up your company profile before creating invoices")
        if not draft.client_name.strip():
            raise InvoiceValidationError("client_name", "Client name is required")
        if not draft.client_email.strip():
            raise InvoiceValidationError("client_email", "Client email is required")

        items = [line for line in (price_line(item) for item in draft.items) if is_billable(line)]
        if not items:
            raise InvoiceValidationError("items", "At least one line item with a description and amount is required")

        tax_rate = draft.tax_rate if draft.tax_rate is not None else profile.tax_percent
        totals = compute_totals(items, tax_rate)
        issue_date = draft.issue_date or today_utc()
        due_date = draft.due_date or issue_date + timedelta(days=self.config.default_due_days)

        invoice_number = self.counter.next_invoice_number(user_id, profile.invoice_prefix)

        invoice = self.invoices.add(
            user_id,
            InvoiceCreate(
                invoice_number=invoice_number,
                client_name=draft.client_name.strip(),
                client_email=draft.client_email.strip(),
                client_address=draft.client_address or None,
                issue_date=issue_date,
                due_date=due_date,
                items=items,
                subtotal=totals.subtotal,
                tax_rate=tax_rate,
                tax=totals.tax,
                total=totals.total,
                notes=draft.notes if draft.notes is not None else profile.default_notes,
                terms=draft.terms or profile.default_terms or self.config.default_terms,
                company_profile=profile.snapshot(),
            ),
        )

        self.audit.log_change(
            entity_type="invoice",
            entity_id=invoice.id,
            action=AuditAction.CREATE,
            changes={
                "created": {
                    "invoice_number": invoice.invoice_number,
                    "client_name": invoice.client_name,
                    "total": str(invoice.total),
                }
            },
        )
        logger.info(f"Created invoice {invoice.invoice_number} ({invoice.total}) for user {user_id}")

        self.event_bus.publish(InvoiceCreated.create(invoice))
        return invoice

    # -- queries ----------------------------------------------------------

    def get_by_id(self, invoice_id: UUID) -> Invoice | None:
        return self.invoices.get(get_current_user_id(), invoice_id)

    def require(self, invoice_id: UUID) -> Invoice:
        """
        Raises:
            ValueError: If the invoice does not exist for this user
        """
        invoice = self.get_by_id(invoice_id)
        if invoice is None:
            raise ValueError(f"Invoice {invoice_id} not found")
        return invoice

    def list_invoices(self, invoice_filter: InvoiceFilter = InvoiceFilter.ALL) -> list[Invoice]:
        """Newest first. PENDING means every status except paid."""
        user_id = get_current_user_id()
        if invoice_filter == InvoiceFilter.PAID:
            return self.invoices.list(user_id, statuses={InvoiceStatus.PAID})
        if invoice_filter == InvoiceFilter.PENDING:
            return self.invoices.list(user_id, exclude_statuses={InvoiceStatus.PAID})
        return self.invoices.list(user_id)

    def summary(self) -> InvoiceSummary:
        invoices = self.invoices.list(get_current_user_id())
        paid = [i for i in invoices if i.is_paid]
        pending = [i for i in invoices if not i.is_paid]
        return InvoiceSummary(
            total_count=len(invoices),
            pending_count=len(pending),
            paid_count=len(paid),
            total_pending=sum((i.total for i in pending), Decimal("0")),
            total_paid=sum((i.total for i in paid), Decimal("0")),
        )

    def delivery_history(self, invoice_id: UUID) -> list[EmailLog]:
        """Email attempts for one of the user's invoices, newest first."""
        invoice = self.require(invoice_id)
        return self.gateway.email_logs.list_for_invoice(invoice.user_id, invoice.id)

    # -- transmission -----------------------------------------------------

    def payment_link_for(self, invoice: Invoice) -> str:
        query = urlencode({"invoice": str(invoice.id), "amount": invoice.total_display})
        return f"{self.config.app_base_url.rstrip('/')}/pay?{query}"

    def send_invoice(self, invoice_id: UUID, subject: str | None = None, message: str | None = None) -> SendResult:
        """
        Email the invoice to the client with its PDF and payment link.

        Resending a sent invoice refreshes sent_at; a viewed invoice stays
        viewed. The status write happens only after the gateway accepts.

        Raises:
            ValueError: Invoice not found
            InvalidStatusTransitionError: Invoice is already paid
            NotificationError: Gateway failed; the invoice is unchanged
        """
        invoice = self.require(invoice_id)
        if invoice.is_paid:
            raise InvalidStatusTransitionError(invoice.status.value, InvoiceStatus.SENT.value)

        payment_link = self.payment_link_for(invoice)
        email_id = self.gateway.send_invoice_email(
            InvoiceEmail(
                invoice=invoice,
                subject=subject or default_subject(invoice),
                message=message or default_message(invoice),
                payment_link=payment_link,
            )
        )

        target = InvoiceStatus.VIEWED if invoice.status == InvoiceStatus.VIEWED else InvoiceStatus.SENT
        updated = self._transition(
            invoice,
            InvoiceTransition(status=target, sent_at=now_utc(), payment_link=payment_link),
        )
        logger.info(f"Sent invoice {updated.invoice_number} to {updated.client_email} (email {email_id})")

        self.event_bus.publish(InvoiceSent.create(updated, email_id=email_id))
        return SendResult(invoice=updated, email_id=email_id, payment_link=payment_link, preview=self.gateway.is_preview)

    def mark_viewed(self, invoice_id: UUID) -> Invoice:
        """
        Record that the client opened a sent invoice. Repeat calls on a
        viewed invoice are no-ops.

        Raises:
            InvalidStatusTransitionError: Invoice is not sent or viewed
        """
        invoice = self.require(invoice_id)
        if invoice.status == InvoiceStatus.VIEWED:
            return invoice
        if invoice.status != InvoiceStatus.SENT:
            raise InvalidStatusTransitionError(invoice.status.value, InvoiceStatus.VIEWED.value)

        updated = self._transition(invoice, InvoiceTransition(status=InvoiceStatus.VIEWED, viewed_at=now_utc()))
        self.event_bus.publish(InvoiceViewed.create(updated))
        return updated

    # -- settlement -------------------------------------------------------

    def mark_paid(self, invoice_id: UUID) -> Invoice:
        """
        Settle the invoice and credit the ledger exactly once.

        The ledger entry is written (or found) before the status update, so
        a failure between the two leaves an unpaid invoice whose retry
        reuses the existing entry. Paying a paid invoice returns it as-is.
        """
        invoice = self.require(invoice_id)
        if invoice.is_paid:
            logger.info(f"Invoice {invoice.invoice_number} already paid")
            return invoice

        entry = self.ledger.credit_invoice(invoice)
        updated = self._transition(invoice, InvoiceTransition(status=InvoiceStatus.PAID, paid_at=now_utc()))
        logger.info(f"Invoice {updated.invoice_number} paid, ledger entry {entry.id}")

        self.event_bus.publish(InvoicePaid.create(updated))
        return updated

    def _transition(self, invoice: Invoice, transition: InvoiceTransition) -> Invoice:
        current, target = invoice.status.effective(), transition.status
        if current == InvoiceStatus.PAID or target.rank < current.rank:
            raise InvalidStatusTransitionError(invoice.status.value, target.value)

        updated = self.invoices.apply_transition(invoice.user_id, invoice.id, transition)
        if updated is None:
            # The stored row moved on since it was read (e.g. paid while an email was in flight)
            latest = self.invoices.get(invoice.user_id, invoice.id)
            if latest is None:
                raise ValueError(f"Invoice {invoice.id} not found")
            raise InvalidStatusTransitionError(latest.status.value, target.value)

        self.audit.log_change(
            entity_type="invoice",
            entity_id=invoice.id,
            action=AuditAction.STATUS_CHANGE,
            changes={"status": {"old": invoice.status.value, "new": updated.status.value}},
        )
        return updated
