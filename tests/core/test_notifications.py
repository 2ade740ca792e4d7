"""Tests for the invoice notification gateway."""

import base64

import pytest

from clients.email_client import EmailGatewayError
from core.exceptions import NotificationError
from core.models import EmailLogStatus
from core.notifications import (
    InvoiceEmail,
    NotificationGateway,
    default_message,
    default_subject,
    render_html_body,
    render_text_body,
)


@pytest.fixture
def invoice_email(draft_invoice):
    return InvoiceEmail(
        invoice=draft_invoice,
        subject=default_subject(draft_invoice),
        message=default_message(draft_invoice),
        payment_link="https://app.example.com/pay?invoice=x&amount=108.00",
    )


@pytest.fixture
def gateway(mock_email_client, email_log_repo, app_config):
    return NotificationGateway(mock_email_client, email_log_repo, app_config)


class TestTemplates:
    def test_default_subject(self, draft_invoice):
        assert default_subject(draft_invoice) == "Invoice INV-00001 from Acme"

    def test_default_message_mentions_amount_and_due_date(self, draft_invoice):
        message = default_message(draft_invoice)
        assert message.startswith("Dear Jane Client,")
        assert "$108.00" in message
        assert draft_invoice.due_date.isoformat() in message

    def test_text_body_has_payment_link(self, invoice_email):
        body = render_text_body(invoice_email)
        assert "Pay this invoice online: https://app.example.com/pay" in body
        assert body.endswith("Sent via IndiePilot")

    def test_html_body_escapes_content(self, invoice_email, draft_invoice):
        hostile = draft_invoice.model_copy(update={
            "company_profile": draft_invoice.company_profile.model_copy(update={"company_name": "<b>Acme</b>"}),
        })
        email = InvoiceEmail(hostile, "s", "Hi <script>\nthere", invoice_email.payment_link)
        html = render_html_body(email)
        assert "<b>Acme</b>" not in html
        assert "&lt;b&gt;Acme&lt;/b&gt;" in html
        assert "&lt;script&gt;<br>there" in html


class TestNotificationGateway:

    def test_requires_client_for_real_email(self, email_log_repo, app_config):
        with pytest.raises(ValueError, match="email_client"):
            NotificationGateway(None, email_log_repo, app_config)

    def test_build_message(self, gateway, invoice_email, draft_invoice):
        message = gateway.build_message(invoice_email)

        assert message.sender == "Acme <invoices@example.com>"
        assert message.to == ["jane@client.com"]
        assert message.headers == {
            "X-Invoice-ID": str(draft_invoice.id),
            "X-Invoice-Number": "INV-00001",
        }
        attachment = message.attachments[0].to_payload()
        assert attachment["filename"] == "INV-00001.pdf"
        assert base64.b64decode(attachment["content"]).startswith(b"%PDF")

    def test_successful_send_logs_sent(self, gateway, invoice_email, email_log_repo):
        assert gateway.send_invoice_email(invoice_email) == "email-123"
        log = email_log_repo.rows[0]
        assert log.status == EmailLogStatus.SENT
        assert log.email_id == "email-123"
        assert log.client_name == "Jane Client"

    def test_failure_logs_and_raises(self, gateway, invoice_email, mock_email_client, email_log_repo):
        mock_email_client.send.side_effect = EmailGatewayError("Email API error: domain not verified")

        with pytest.raises(NotificationError, match="domain not verified"):
            gateway.send_invoice_email(invoice_email)

        log = email_log_repo.rows[0]
        assert log.status == EmailLogStatus.FAILED
        assert log.email_id is None

    def test_preview_mode_does_not_dispatch(self, email_log_repo, app_config, invoice_email, caplog):
        config = app_config.model_copy(update={"use_real_email": False})
        gateway = NotificationGateway(None, email_log_repo, config)

        email_id = gateway.send_invoice_email(invoice_email)

        assert gateway.is_preview
        assert email_id.startswith("preview-")
        assert email_log_repo.rows[0].status == EmailLogStatus.PREVIEW
        assert "preview mode" in caplog.text
