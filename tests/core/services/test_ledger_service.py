"""Tests for LedgerService."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from core.audit import AuditAction
from core.models import IncomeCategory, IncomeEntryCreate


class TestAddEntry:
    """Tests for manual income entries."""

    def test_records_entry(self, ledger_service, ledger_repo, as_test_user):
        entry = ledger_service.add_entry(IncomeEntryCreate(
            amount=Decimal("250"),
            description="Consulting retainer",
            date=date(2024, 5, 1),
            category=IncomeCategory.CONSULTING,
        ))
        assert entry.amount == Decimal("250.00")
        assert entry.category == IncomeCategory.CONSULTING
        assert ledger_repo.entries == [entry]

    def test_amount_is_rounded_to_cents(self, ledger_service, as_test_user):
        entry = ledger_service.add_entry(IncomeEntryCreate(amount=Decimal("10.005"), description="Tip"))
        assert entry.amount == Decimal("10.01")

    def test_rejects_non_positive_amount(self):
        with pytest.raises(ValidationError):
            IncomeEntryCreate(amount=Decimal("0"), description="Nothing")

    def test_rejects_empty_description(self):
        with pytest.raises(ValidationError):
            IncomeEntryCreate(amount=Decimal("5"), description="")

    def test_defaults(self):
        data = IncomeEntryCreate(amount=Decimal("5"), description="Sale")
        assert data.category == IncomeCategory.SERVICE
        assert data.invoice_reference is None
        assert isinstance(data.date, date)

    def test_audits_and_publishes(self, ledger_service, audit, event_bus, as_test_user):
        received = []
        event_bus.subscribe("IncomeRecorded", received.append)

        entry = ledger_service.add_entry(IncomeEntryCreate(amount=Decimal("5"), description="Sale"))

        assert received[0].entry == entry
        assert audit.log_change.call_args.kwargs["entity_type"] == "income_entry"
        assert audit.log_change.call_args.kwargs["action"] == AuditAction.CREATE


class TestCreditInvoice:
    def test_existing_reference_is_returned(self, ledger_service, ledger_repo, draft_invoice, audit):
        first = ledger_service.credit_invoice(draft_invoice)
        audit.reset_mock()

        second = ledger_service.credit_invoice(draft_invoice)

        assert second.id == first.id
        assert len(ledger_repo.entries) == 1
        audit.log_change.assert_not_called()


class TestQueries:
    def test_total_and_recent(self, ledger_service, as_test_user):
        for day, amount in [(1, "10"), (3, "30"), (2, "20")]:
            ledger_service.add_entry(IncomeEntryCreate(
                amount=Decimal(amount), description=f"Day {day}", date=date(2024, 1, day),
            ))

        assert ledger_service.total_income() == Decimal("60.00")
        assert [e.description for e in ledger_service.list_recent(limit=2)] == ["Day 3", "Day 2"]

    def test_recent_uses_configured_limit(self, ledger_service, as_test_user):
        for n in range(12):
            ledger_service.add_entry(IncomeEntryCreate(amount=Decimal("1"), description=f"Entry {n}"))
        assert len(ledger_service.list_recent()) == 10

    def test_entries_are_per_user(self, ledger_service, test_user_id, test_user_b_id):
        from utils.user_context import user_context

        with user_context(test_user_id):
            ledger_service.add_entry(IncomeEntryCreate(amount=Decimal("99"), description="Mine"))
        with user_context(test_user_b_id):
            assert ledger_service.total_income() == Decimal("0")
            assert ledger_service.list_recent() == []
