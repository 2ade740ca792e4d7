"""Shared test fixtures for the IndiePilot test suite.

Stores are in-memory implementations of the repository protocols, so the
suite needs neither Postgres nor Valkey.
"""

import threading
from decimal import Decimal
from pathlib import Path
from unittest.mock import Mock
from uuid import UUID, uuid4

import pytest
from dotenv import load_dotenv

# Load .env before anything reads the environment
load_dotenv(Path(__file__).parent.parent / ".env")

# Reset vault client singleton so tests never reuse a real session
import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from clients.email_client import EmailApiClient
from core.audit import AuditLogger
from core.config import AppConfig
from core.event_bus import EventBus
from core.exceptions import CounterUnavailableError, StoreUnavailableError
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
from utils.timezone import now_utc
from utils.user_context import clear_current_user_id, user_context


# =============================================================================
# TEST USER CONSTANTS
# =============================================================================

TEST_USER_ID = UUID("00000000-0000-0000-0000-000000000001")
TEST_USER_EMAIL = "testuser@example.com"

# Secondary user for isolation tests
TEST_USER_B_ID = UUID("00000000-0000-0000-0000-000000000002")


# =============================================================================
# IN-MEMORY STORES
# =============================================================================


class InMemoryInvoiceRepository:
    def __init__(self):
        self.rows: dict[UUID, Invoice] = {}
        self.unavailable = False
        self.transition_calls = 0

    def _check(self):
        if self.unavailable:
            raise StoreUnavailableError("invoice store down")

    def add(self, user_id: UUID, data: InvoiceCreate) -> Invoice:
        self._check()
        now = now_utc()
        invoice = Invoice.model_validate({
            **data.model_dump(),
            "id": uuid4(),
            "user_id": user_id,
            "created_at": now,
            "updated_at": now,
        })
        self.rows[invoice.id] = invoice
        return invoice

    def get(self, user_id: UUID, invoice_id: UUID) -> Invoice | None:
        self._check()
        invoice = self.rows.get(invoice_id)
        return invoice if invoice and invoice.user_id == user_id else None

    def list(self, user_id, statuses=None, exclude_statuses=None) -> list[Invoice]:
        self._check()
        result = [i for i in self.rows.values() if i.user_id == user_id]
        if statuses:
            result = [i for i in result if i.status in statuses]
        if exclude_statuses:
            result = [i for i in result if i.status not in exclude_statuses]
        return list(reversed(result))

    def apply_transition(self, user_id, invoice_id, transition: InvoiceTransition) -> Invoice | None:
        self._check()
        self.transition_calls += 1
        current = self.get(user_id, invoice_id)
        if current is None:
            return None
        if current.status == InvoiceStatus.PAID or current.status.rank > transition.status.rank:
            return None
        changes = {k: v for k, v in transition.model_dump().items() if v is not None}
        updated = current.model_copy(update={**changes, "updated_at": now_utc()})
        self.rows[invoice_id] = updated
        return updated

    def find_owner(self, invoice_id: UUID) -> UUID | None:
        invoice = self.rows.get(invoice_id)
        return invoice.user_id if invoice else None


class InMemoryCounterRepository:
    def __init__(self):
        self.values: dict[UUID, int] = {}
        self.unavailable = False
        self._lock = threading.Lock()

    def increment(self, user_id: UUID) -> int:
        if self.unavailable:
            raise CounterUnavailableError("counter store down")
        with self._lock:
            value = self.values.get(user_id, 1)
            self.values[user_id] = value + 1
            return value


class InMemoryLedgerRepository:
    def __init__(self):
        self.entries: list[IncomeEntry] = []
        self.unavailable = False

    def add(self, user_id: UUID, data: IncomeEntryCreate) -> IncomeEntry:
        if self.unavailable:
            raise StoreUnavailableError("ledger store down")
        if data.invoice_reference:
            existing = self.find_by_reference(user_id, data.invoice_reference)
            if existing:
                return existing
        entry = IncomeEntry(id=uuid4(), user_id=user_id, created_at=now_utc(), **data.model_dump())
        self.entries.append(entry)
        return entry

    def find_by_reference(self, user_id: UUID, reference: str) -> IncomeEntry | None:
        for entry in self.entries:
            if entry.user_id == user_id and entry.invoice_reference == reference:
                return entry
        return None

    def list_recent(self, user_id: UUID, limit: int) -> list[IncomeEntry]:
        mine = [e for e in reversed(self.entries) if e.user_id == user_id]
        return sorted(mine, key=lambda e: e.date, reverse=True)[:limit]

    def total(self, user_id: UUID) -> Decimal:
        return sum((e.amount for e in self.entries if e.user_id == user_id), Decimal("0"))


class InMemoryProfileRepository:
    def __init__(self):
        self.rows: dict[UUID, CompanyProfile] = {}

    def get(self, user_id: UUID) -> CompanyProfile | None:
        return self.rows.get(user_id)

    def upsert(self, user_id: UUID, data: CompanyProfileUpdate) -> CompanyProfile:
        profile = CompanyProfile(user_id=user_id, updated_at=now_utc(), **data.model_dump())
        self.rows[user_id] = profile
        return profile


class InMemoryEmailLogRepository:
    def __init__(self):
        self.rows: list[EmailLog] = []

    def add(self, data: EmailLogCreate) -> EmailLog:
        log = EmailLog(id=uuid4(), created_at=now_utc(), **data.model_dump())
        self.rows.append(log)
        return log

    def list_for_invoice(self, user_id: UUID, invoice_id: UUID) -> list[EmailLog]:
        return [r for r in reversed(self.rows) if r.user_id == user_id and r.invoice_id == invoice_id]


class FakeValkey:
    """Dict-backed stand-in for ValkeyClient. TTLs are recorded, not enforced."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, expire_seconds=None):
        self.data[key] = value
        if expire_seconds is not None:
            self.ttls[key] = expire_seconds

    def pop(self, key):
        self.ttls.pop(key, None)
        return self.data.pop(key, None)

    def delete(self, key):
        self.ttls.pop(key, None)
        return self.data.pop(key, None) is not None

    def exists(self, key):
        return key in self.data

    def ttl(self, key):
        if key not in self.data:
            return -2
        return self.ttls.get(key, -1)

    def expire(self, key, seconds):
        if key not in self.data:
            return False
        self.ttls[key] = seconds
        return True

    def incr(self, key):
        value = int(self.data.get(key, "0")) + 1
        self.data[key] = str(value)
        return value

    def set_json(self, key, value, expire_seconds=None):
        import json
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key):
        import json
        raw = self.get(key)
        return json.loads(raw) if raw is not None else None


# =============================================================================
# USER CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_user_context():
    """Ensure clean user context before and after each test."""
    clear_current_user_id()
    yield
    clear_current_user_id()


@pytest.fixture
def test_user_id() -> UUID:
    return TEST_USER_ID


@pytest.fixture
def test_user_b_id() -> UUID:
    return TEST_USER_B_ID


@pytest.fixture
def as_test_user(test_user_id):
    with user_context(test_user_id):
        yield test_user_id


@pytest.fixture
def as_test_user_b(test_user_b_id):
    with user_context(test_user_b_id):
        yield test_user_b_id


# =============================================================================
# STORE AND COLLABORATOR FIXTURES
# =============================================================================


@pytest.fixture
def invoice_repo():
    return InMemoryInvoiceRepository()


@pytest.fixture
def counter_repo():
    return InMemoryCounterRepository()


@pytest.fixture
def ledger_repo():
    return InMemoryLedgerRepository()


@pytest.fixture
def profile_repo():
    return InMemoryProfileRepository()


@pytest.fixture
def email_log_repo():
    return InMemoryEmailLogRepository()


@pytest.fixture
def fake_valkey():
    return FakeValkey()


@pytest.fixture
def audit():
    return Mock(spec=AuditLogger)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def app_config(tmp_path):
    return AppConfig(
        app_base_url="https://app.example.com",
        use_real_email=True,
        sender_domain="example.com",
        documents_dir=tmp_path / "documents",
    )


@pytest.fixture
def mock_email_client():
    """Email API double; every send is accepted with a fixed id."""
    mock = Mock(spec=EmailApiClient)
    mock.send.return_value = "email-123"
    return mock


@pytest.fixture
def services(
    invoice_repo, counter_repo, ledger_repo, profile_repo, email_log_repo,
    audit, app_config, mock_email_client, event_bus,
):
    from main import build_services

    return build_services(
        invoices=invoice_repo,
        counters=counter_repo,
        ledger=ledger_repo,
        profiles=profile_repo,
        email_logs=email_log_repo,
        audit=audit,
        config=app_config,
        email_client=mock_email_client,
        event_bus=event_bus,
    )


@pytest.fixture
def invoice_service(services):
    return services["invoice"]


@pytest.fixture
def ledger_service(services):
    return services["ledger"]


@pytest.fixture
def profile_service(services):
    return services["profile"]


@pytest.fixture
def payment_service(services):
    return services["payment"]


@pytest.fixture
def acme_profile(profile_repo, test_user_id):
    """Company profile for the primary test user: Acme, 8% tax, INV prefix."""
    return profile_repo.upsert(
        test_user_id,
        CompanyProfileUpdate(
            company_name="Acme",
            email="billing@acme.com",
            phone="555-0100",
            address="1 Main St",
            tax_percent=Decimal("8"),
            invoice_prefix="INV",
        ),
    )


@pytest.fixture
def make_draft():
    """Factory for a valid invoice draft; keyword arguments override fields."""
    from core.models import InvoiceDraft, LineItemInput

    def _make(**overrides):
        data = {
            "client_name": "Jane Client",
            "client_email": "jane@client.com",
            "items": [LineItemInput(description="Design work", quantity=Decimal("2"), rate=Decimal("50"))],
        }
        data.update(overrides)
        return InvoiceDraft(**data)

    return _make


@pytest.fixture
def draft_invoice(invoice_service, acme_profile, as_test_user, make_draft) -> Invoice:
    """Persisted draft: 2 x 50.00 at 8% tax, INV-00001."""
    return invoice_service.create_invoice(make_draft())


def assert_status(invoice: Invoice, status: InvoiceStatus):
    assert invoice.status == status, f"expected {status.value}, got {invoice.status.value}"
