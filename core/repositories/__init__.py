"""Typed, user-scoped stores for the invoice domain."""

from core.repositories.protocols import (
    CounterRepository,
    EmailLogRepository,
    InvoiceRepository,
    LedgerRepository,
    ProfileRepository,
)
from core.repositories.invoices import PostgresInvoiceRepository
from core.repositories.counters import PostgresCounterRepository
from core.repositories.ledger import PostgresLedgerRepository
from core.repositories.profiles import PostgresProfileRepository
from core.repositories.email_logs import PostgresEmailLogRepository

__all__ = [
    "CounterRepository", "EmailLogRepository", "InvoiceRepository",
    "LedgerRepository", "ProfileRepository",
    "PostgresInvoiceRepository", "PostgresCounterRepository",
    "PostgresLedgerRepository", "PostgresProfileRepository",
    "PostgresEmailLogRepository",
]
