"""
Client for a Resend-compatible transactional email HTTP API.

POSTs JSON to `<api_url>/emails` with a bearer key and returns the
provider's message id.
"""

import base64
import logging
from dataclasses import dataclass, field

import requests

logger = logging.getLogger(__name__)


class EmailGatewayError(Exception):
    """The email API rejected the request or could not be reached."""


@dataclass
class EmailAttachment:
    filename: str
    content: bytes

    def to_payload(self) -> dict:
        return {
            "filename": self.filename,
            "content": base64.b64encode(self.content).decode("ascii"),
        }


@dataclass
class OutboundEmail:
    """One message as handed to the API."""

    sender: str
    to: list[str]
    subject: str
    text: str
    html: str | None = None
    attachments: list[EmailAttachment] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)

    def to_payload(self) -> dict:
        payload = {
            "from": self.sender,
            "to": self.to,
            "subject": self.subject,
            "text": self.text,
        }
        if self.html:
            payload["html"] = self.html
        if self.attachments:
            payload["attachments"] = [a.to_payload() for a in self.attachments]
        if self.headers:
            payload["headers"] = self.headers
        return payload


class EmailApiClient:
    """Send email through the HTTP API. No retries; callers decide."""

    def __init__(self, api_url: str, api_key: str, timeout: int = 10):
        """
        Args:
            api_url: API base URL, e.g. https://api.resend.com
            api_key: Bearer key for the Authorization header
            timeout: Request timeout in seconds

        Raises:
            ValueError: If a credential is empty
        """
        if not api_url:
            raise ValueError("api_url is required")
        if not api_key:
            raise ValueError("api_key is required")

        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def send(self, email: OutboundEmail) -> str:
        """
        Dispatch `email`.

        Returns:
            Provider message id

        Raises:
            EmailGatewayError: On connection failure, non-2xx status or a
                response without an id
        """
        try:
            response = requests.post(
                f"{self.api_url}/emails",
                json=email.to_payload(),
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Email API connection failed: {e}")
            raise EmailGatewayError(f"Connection failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            message = body.get("message") or response.text or f"HTTP {response.status_code}"
            logger.error(f"Email API error ({response.status_code}): {message}")
            raise EmailGatewayError(f"Email API error: {message}")

        email_id = body.get("id")
        if not email_id:
            logger.error(f"Email API returned no id: {response.text}")
            raise EmailGatewayError("Email API response missing id")

        logger.info(f"Email {email_id} sent to {', '.join(email.to)}: {email.subject}")
        return email_id

    def send_text(self, sender: str, to: str, subject: str, body: str) -> str:
        """Plain-text convenience used for account emails."""
        return self.send(OutboundEmail(sender=sender, to=[to], subject=subject, text=body))
