"""
Store interfaces used by the services.

Every user-scoped method takes the owning user id explicitly and returns
typed entities. Implementations raise StoreUnavailableError when the
backing store cannot be reached.
"""

from decimal import Decimal
from typing import Protocol
from uuid import UUID

from core.models import (
    CompanyProfile,
    CompanyProfileUpdate,
    EmailLog,
    EmailLogCreate,
    IncomeEntry,
    IncomeEntryCreate,
    Invoice,
    InvoiceCreate,
    InvoiceStatus,
    InvoiceTransition,
)


class InvoiceRepository(Protocol):
    def add(self, user_id: UUID, data: InvoiceCreate) -> Invoice: ...

    def get(self, user_id: UUID, invoice_id: UUID) -> Invoice | None: ...

    def list(
        self,
        user_id: UUID,
        statuses: set[InvoiceStatus] | None = None,
        exclude_statuses: set[InvoiceStatus] | None = None,
    ) -> list[Invoice]: ...

    def apply_transition(
        self, user_id: UUID, invoice_id: UUID, transition: InvoiceTransition
    ) -> Invoice | None: ...

    def find_owner(self, invoice_id: UUID) -> UUID | None: ...


class CounterRepository(Protocol):
    def increment(self, user_id: UUID) -> int:
        """Return the current value (1 when absent) and store value + 1, atomically."""
        ...


class LedgerRepository(Protocol):
    def add(self, user_id: UUID, data: IncomeEntryCreate) -> IncomeEntry: ...

    def find_by_reference(self, user_id: UUID, reference: str) -> IncomeEntry | None: ...

    def list_recent(self, user_id: UUID, limit: int) -> list[IncomeEntry]: ...

    def total(self, user_id: UUID) -> Decimal: ...


class ProfileRepository(Protocol):
    def get(self, user_id: UUID) -> CompanyProfile | None: ...

    def upsert(self, user_id: UUID, data: CompanyProfileUpdate) -> CompanyProfile: ...


class EmailLogRepository(Protocol):
    def add(self, data: EmailLogCreate) -> EmailLog: ...

    def list_for_invoice(self, user_id: UUID, invoice_id: UUID) -> list[EmailLog]: ...
