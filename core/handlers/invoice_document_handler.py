"""
Handler for InvoiceCreated events.

Keeps a local PDF copy of every new invoice under
`<documents_dir>/<user_id>/<invoice_number>.pdf`.
"""

import logging
from pathlib import Path
from typing import Callable

from core.documents import render_invoice_pdf
from core.events import InvoiceCreated

logger = logging.getLogger(__name__)


def document_path(documents_dir: Path, invoice) -> Path:
    return Path(documents_dir) / str(invoice.user_id) / f"{invoice.invoice_number}.pdf"


def handle_invoice_created(documents_dir: Path) -> Callable:
    """
    Factory that returns an InvoiceCreated handler.

    Args:
        documents_dir: Root folder for local copies

    Returns:
        Handler callable that renders and writes the PDF
    """

    def handler(event: InvoiceCreated):
        invoice = event.invoice
        path = document_path(documents_dir, invoice)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(render_invoice_pdf(invoice))
        logger.info(f"Saved local copy of {invoice.invoice_number} to {path}")

    return handler
