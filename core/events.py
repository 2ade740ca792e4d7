"""
Domain events for the invoice lifecycle and the income ledger.

Events are immutable and carry the entity as it was right after the change,
so handlers never re-read state that may not be visible yet.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for all domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


@dataclass(frozen=True)
class InvoiceEvent(DomainEvent):
    invoice: Any = None  # Invoice; Any keeps core.models out of this module

    @classmethod
    def create(cls, invoice: Any):
        return cls(invoice=invoice)


@dataclass(frozen=True)
class InvoiceCreated(InvoiceEvent):
    """A draft invoice was persisted with a freshly minted number."""


@dataclass(frozen=True)
class InvoiceSent(InvoiceEvent):
    """The invoice email was accepted by the gateway and status recorded."""
    email_id: str = ""

    @classmethod
    def create(cls, invoice: Any, email_id: str = "") -> "InvoiceSent":
        return cls(invoice=invoice, email_id=email_id)


@dataclass(frozen=True)
class InvoiceViewed(InvoiceEvent):
    """The client opened the invoice."""


@dataclass(frozen=True)
class InvoicePaid(InvoiceEvent):
    """The invoice was settled and its ledger entry exists."""


@dataclass(frozen=True)
class IncomeRecorded(DomainEvent):
    """A ledger entry was written, manually or on settlement."""
    entry: Any = None

    @classmethod
    def create(cls, entry: Any) -> "IncomeRecorded":
        return cls(entry=entry)
