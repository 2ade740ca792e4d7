"""
Notification gateway: invoice emails with the PDF attached.

Every dispatch attempt lands in email_logs (sent, failed or preview) before
control returns to the caller. Whether mail really leaves the building is
fixed at construction via AppConfig.use_real_email.
"""

import html
import logging
from dataclasses import dataclass
from uuid import uuid4

from clients.email_client import EmailApiClient, EmailAttachment, EmailGatewayError, OutboundEmail
from core.config import AppConfig
from core.documents import render_invoice_pdf
from core.exceptions import NotificationError
from core.models import EmailLogCreate, EmailLogStatus, Invoice
from core.money import format_money
from core.repositories import EmailLogRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceEmail:
    """What the workflow asks the gateway to deliver."""

    invoice: Invoice
    subject: str
    message: str
    payment_link: str


def default_subject(invoice: Invoice) -> str:
    return f"Invoice {invoice.invoice_number} from {invoice.company_profile.company_name}"


def default_message(invoice: Invoice) -> str:
    company = invoice.company_profile.company_name
    return (
        f"Dear {invoice.client_name},\n\n"
        f"Thank you for your business. Please find attached your invoice {invoice.invoice_number}.\n\n"
        f"Amount Due: {format_money(invoice.total)}\n"
        f"Due Date: {invoice.due_date.isoformat()}\n\n"
        "You can pay this invoice online using the secure payment link below.\n\n"
        "If you have any questions about this invoice, please don't hesitate to contact us.\n\n"
        f"Best regards,\n{company}"
    )


def render_text_body(email: InvoiceEmail) -> str:
    invoice = email.invoice
    return (
        f"{email.message}\n\n"
        "Invoice Details:\n"
        f"- Invoice Number: {invoice.invoice_number}\n"
        f"- Amount Due: {format_money(invoice.total)}\n"
        f"- Due Date: {invoice.due_date.isoformat()}\n\n"
        f"Pay this invoice online: {email.payment_link}\n\n"
        f"{invoice.company_profile.company_name}\n"
        "Sent via IndiePilot"
    )


def render_html_body(email: InvoiceEmail) -> str:
    invoice = email.invoice
    company = html.escape(invoice.company_profile.company_name)
    number = html.escape(invoice.invoice_number)
    link = html.escape(email.payment_link, quote=True)
    color = html.escape(invoice.company_profile.brand_color, quote=True)
    message = html.escape(email.message).replace("\n", "<br>")
    return f"""<!DOCTYPE html>
<html>
<body style="font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; color: #333; max-width: 600px; margin: 0 auto; padding: 20px; background: #f5f5f5;">
  <div style="background: #fff; border-radius: 10px; overflow: hidden;">
    <div style="background: {color}; color: #fff; padding: 30px; text-align: center;">
      <h1 style="margin: 0; font-size: 28px;">{company}</h1>
      <p style="margin: 10px 0 0 0;">Invoice {number}</p>
    </div>
    <div style="padding: 30px;">
      <div style="line-height: 1.8; color: #4b5563;">{message}</div>
      <div style="background: #f9fafb; padding: 20px; border-radius: 8px; margin: 20px 0; border-left: 4px solid {color};">
        <h3 style="margin-top: 0;">Invoice Details</h3>
        <p><strong>Invoice Number:</strong> {number}</p>
        <p><strong>Amount Due:</strong> <span style="font-size: 24px; color: #059669; font-weight: bold;">{format_money(invoice.total)}</span></p>
        <p><strong>Due Date:</strong> {invoice.due_date.isoformat()}</p>
      </div>
      <p style="text-align: center;">
        <a href="{link}" style="display: inline-block; padding: 14px 30px; background: {color}; color: #fff; text-decoration: none; border-radius: 50px; font-weight: 600;">Pay Invoice Online</a>
      </p>
      <p style="text-align: center; color: #6b7280; font-size: 14px;">Or copy this link:<br><code>{link}</code></p>
      <div style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #e5e7eb; text-align: center; color: #6b7280; font-size: 14px;">
        <p><strong>{company}</strong></p>
        <p>This invoice was sent via IndiePilot</p>
      </div>
    </div>
  </div>
</body>
</html>"""


class NotificationGateway:
    """
    Delivers invoice emails through the email API, or records a preview
    when real delivery is disabled.
    """

    def __init__(
        self,
        email_client: EmailApiClient | None,
        email_logs: EmailLogRepository,
        config: AppConfig,
    ):
        if config.use_real_email and email_client is None:
            raise ValueError("email_client is required when use_real_email is enabled")
        self.email_client = email_client
        self.email_logs = email_logs
        self.config = config

    @property
    def is_preview(self) -> bool:
        return not self.config.use_real_email

    def sender_for(self, invoice: Invoice) -> str:
        return f"{invoice.company_profile.company_name} <invoices@{self.config.sender_domain}>"

    def build_message(self, email: InvoiceEmail) -> OutboundEmail:
        invoice = email.invoice
        return OutboundEmail(
            sender=self.sender_for(invoice),
            to=[invoice.client_email],
            subject=email.subject,
            text=render_text_body(email),
            html=render_html_body(email),
            attachments=[EmailAttachment(f"{invoice.invoice_number}.pdf", render_invoice_pdf(invoice))],
            headers={
                "X-Invoice-ID": str(invoice.id),
                "X-Invoice-Number": invoice.invoice_number,
            },
        )

    def send_invoice_email(self, email: InvoiceEmail) -> str:
        """
        Deliver `email` and return the send id.

        Raises:
            NotificationError: The API rejected or never received the
                message. A failed log row has been written.
        """
        invoice = email.invoice
        message = self.build_message(email)

        if self.is_preview:
            email_id = f"preview-{uuid4()}"
            logger.warning(
                f"Email preview mode: invoice {invoice.invoice_number} to {invoice.client_email} not dispatched"
            )
            self._log(invoice, EmailLogStatus.PREVIEW, email_id=email_id)
            return email_id

        try:
            email_id = self.email_client.send(message)
        except EmailGatewayError as e:
            logger.error(f"Failed to send invoice {invoice.invoice_number} to {invoice.client_email}: {e}")
            self._log(invoice, EmailLogStatus.FAILED, error=str(e))
            raise NotificationError(f"Failed to send email: {e}") from e

        self._log(invoice, EmailLogStatus.SENT, email_id=email_id)
        return email_id

    def _log(self, invoice: Invoice, status: EmailLogStatus, email_id: str | None = None, error: str | None = None):
        self.email_logs.add(
            EmailLogCreate(
                user_id=invoice.user_id,
                invoice_id=invoice.id,
                invoice_number=invoice.invoice_number,
                client_email=invoice.client_email,
                client_name=invoice.client_name,
                status=status,
                email_id=email_id,
                error=error,
            )
        )
