"""Tests for EventBus."""

import logging

import pytest

from core.event_bus import EventBus
from core.events import InvoiceCreated, InvoicePaid


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def _invoice(draft_invoice):
    return draft_invoice


# =============================================================================
# SUBSCRIBE AND PUBLISH
# =============================================================================


class TestSubscribeAndPublish:

    def test_single_handler_receives_the_exact_event_object(self, _invoice):
        bus = EventBus()
        received = []
        bus.subscribe("InvoiceCreated", received.append)

        event = InvoiceCreated.create(_invoice)
        bus.publish(event)

        assert received == [event]
        assert received[0] is event

    def test_multiple_handlers_called_in_subscription_order(self, _invoice):
        bus = EventBus()
        order = []
        bus.subscribe("InvoiceCreated", lambda e: order.append("A"))
        bus.subscribe("InvoiceCreated", lambda e: order.append("B"))
        bus.subscribe("InvoiceCreated", lambda e: order.append("C"))

        bus.publish(InvoiceCreated.create(_invoice))

        assert order == ["A", "B", "C"]

    def test_type_isolation_only_matching_subscribers_called(self, _invoice):
        bus = EventBus()
        created, paid = [], []
        bus.subscribe("InvoiceCreated", created.append)
        bus.subscribe("InvoicePaid", paid.append)

        bus.publish(InvoicePaid.create(_invoice))

        assert created == []
        assert len(paid) == 1

    def test_no_subscribers_does_not_raise(self, _invoice):
        EventBus().publish(InvoiceCreated.create(_invoice))

    def test_handlers_for_returns_copy(self):
        bus = EventBus()
        bus.subscribe("InvoicePaid", print)
        handlers = bus.handlers_for("InvoicePaid")
        handlers.clear()
        assert bus.handlers_for("InvoicePaid") == [print]


# =============================================================================
# HANDLER ERROR ISOLATION
# =============================================================================


class TestHandlerErrorIsolation:

    def test_handler_exception_is_logged_with_event_type_and_event_id(self, _invoice, caplog):
        bus = EventBus()

        def failing_handler(event):
            raise ValueError("pdf render failed")

        bus.subscribe("InvoiceCreated", failing_handler)

        with caplog.at_level(logging.ERROR, logger="core.event_bus"):
            event = InvoiceCreated.create(_invoice)
            bus.publish(event)

        assert "pdf render failed" in caplog.text
        assert "InvoiceCreated" in caplog.text
        assert event.event_id in caplog.text

    def test_second_handler_runs_after_first_handler_raises(self, _invoice):
        bus = EventBus()
        seen = []

        def failing_handler(event):
            raise RuntimeError("fail")

        bus.subscribe("InvoicePaid", failing_handler)
        bus.subscribe("InvoicePaid", lambda e: seen.append(e.invoice.id))

        bus.publish(InvoicePaid.create(_invoice))

        assert seen == [_invoice.id]

    def test_failing_handler_does_not_fail_invoice_creation(
        self, invoice_service, event_bus, acme_profile, as_test_user, make_draft
    ):
        event_bus.subscribe("InvoiceCreated", lambda e: 1 / 0)
        invoice = invoice_service.create_invoice(make_draft())
        assert invoice_service.get_by_id(invoice.id) is not None
