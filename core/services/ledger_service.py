"""
Income ledger: manual income entries and the entry written when an invoice
is settled.
"""

import logging
from decimal import Decimal

from core.audit import AuditAction, AuditLogger
from core.event_bus import EventBus
from core.events import IncomeRecorded
from core.models import IncomeCategory, IncomeEntry, IncomeEntryCreate, Invoice
from core.money import to_cents
from core.repositories import LedgerRepository
from utils.timezone import today_utc
from utils.user_context import get_current_user_id

logger = logging.getLogger(__name__)


class LedgerService:
    """Append-only income entries for the current user."""

    def __init__(self, ledger: LedgerRepository, audit: AuditLogger, event_bus: EventBus, recent_limit: int = 10):
        self.ledger = ledger
        self.audit = audit
        self.event_bus = event_bus
        self.recent_limit = recent_limit

    def add_entry(self, data: IncomeEntryCreate) -> IncomeEntry:
        """Record income entered by the user."""
        user_id = get_current_user_id()
        data = data.model_copy(update={"amount": to_cents(data.amount)})
        entry = self.ledger.add(user_id, data)
        self._record(entry)
        return entry

    def credit_invoice(self, invoice: Invoice) -> IncomeEntry:
        """
        Ledger entry for a settled invoice, written at most once.

        If an entry referencing the invoice number already exists it is
        returned unchanged and nothing new is written.
        """
        user_id = get_current_user_id()
        existing = self.ledger.find_by_reference(user_id, invoice.invoice_number)
        if existing is not None:
            logger.info(f"Ledger entry for {invoice.invoice_number} already exists, not crediting again")
            return existing

        entry = self.ledger.add(
            user_id,
            IncomeEntryCreate(
                amount=invoice.total,
                description=f"Invoice {invoice.invoice_number} - {invoice.client_name}",
                date=today_utc(),
                category=IncomeCategory.SERVICE,
                invoice_reference=invoice.invoice_number,
            ),
        )
        self._record(entry)
        return entry

    def list_recent(self, limit: int | None = None) -> list[IncomeEntry]:
        """Most recent entries by date."""
        return self.ledger.list_recent(get_current_user_id(), limit or self.recent_limit)

    def total_income(self) -> Decimal:
        return self.ledger.total(get_current_user_id())

    def _record(self, entry: IncomeEntry) -> None:
        self.audit.log_change(
            entity_type="income_entry",
            entity_id=entry.id,
            action=AuditAction.CREATE,
            changes={"created": entry.model_dump(mode="json", exclude={"id", "user_id"})},
        )
        self.event_bus.publish(IncomeRecorded.create(entry))
