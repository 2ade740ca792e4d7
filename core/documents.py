"""
PDF rendering for invoices and service agreements.

Both documents share one A4 layout engine drawn with the reportlab canvas.
Coordinates below are millimetres from the top-left corner; `_Page`
converts them to reportlab's bottom-left points.
"""

import io
import logging
from decimal import Decimal

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from core.models import CompanySnapshot, ContractDocument, Invoice
from core.money import format_money

logger = logging.getLogger(__name__)

PAGE_WIDTH = A4[0] / mm
PAGE_HEIGHT = A4[1] / mm
MARGIN = 20
LINE_HEIGHT = 5
DEFAULT_BRAND_COLOR = "#2563eb"

PANEL_FILL = colors.Color(245 / 255, 247 / 255, 250 / 255)
ZEBRA_FILL = colors.Color(250 / 255, 250 / 255, 250 / 255)
MUTED_TEXT = colors.Color(100 / 255, 100 / 255, 100 / 255)
FOOTER_TEXT = colors.Color(150 / 255, 150 / 255, 150 / 255)


def brand_color(value: str | None) -> colors.Color:
    """Parse '#rrggbb', falling back to the default blue on anything else."""
    try:
        return colors.HexColor(value or DEFAULT_BRAND_COLOR)
    except (ValueError, TypeError):
        logger.warning(f"Invalid brand color {value!r}, using default")
        return colors.HexColor(DEFAULT_BRAND_COLOR)


class _Page:
    """Top-left-origin millimetre drawing helpers over a canvas."""

    def __init__(self, title: str, footer: str):
        self.buffer = io.BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=A4)
        self.canvas.setTitle(title)
        self.canvas.setCreator("IndiePilot")
        self.footer = footer
        self.y = MARGIN

    def font(self, size: float, bold: bool = False, color=colors.black) -> None:
        self.canvas.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self.canvas.setFillColor(color)

    def text(self, x: float, y: float, value: str, align: str = "left") -> None:
        px, py = x * mm, (PAGE_HEIGHT - y) * mm
        if align == "right":
            self.canvas.drawRightString(px, py, value)
        elif align == "center":
            self.canvas.drawCentredString(px, py, value)
        else:
            self.canvas.drawString(px, py, value)

    def rect(self, x: float, y: float, width: float, height: float, fill) -> None:
        self.canvas.setFillColor(fill)
        self.canvas.rect(x * mm, (PAGE_HEIGHT - y - height) * mm, width * mm, height * mm, stroke=0, fill=1)

    def line(self, x1: float, x2: float, y: float, color, width: float = 0.5) -> None:
        self.canvas.setStrokeColor(color)
        self.canvas.setLineWidth(width)
        self.canvas.line(x1 * mm, (PAGE_HEIGHT - y) * mm, x2 * mm, (PAGE_HEIGHT - y) * mm)

    def ensure_room(self, needed: float) -> None:
        """Start a new page when fewer than `needed` mm remain above the footer."""
        if self.y + needed > PAGE_HEIGHT - 30:
            self.new_page()

    def new_page(self) -> None:
        self._draw_footer()
        self.canvas.showPage()
        self.y = MARGIN

    def paragraph(self, value: str, size: float = 10) -> None:
        """Wrapped body text at the left margin, breaking pages as needed."""
        self.font(size)
        width = (PAGE_WIDTH - 2 * MARGIN) * mm
        for raw_line in value.splitlines() or [""]:
            for wrapped in simpleSplit(raw_line, "Helvetica", size, width) or [""]:
                self.ensure_room(LINE_HEIGHT)
                self.font(size)
                self.text(MARGIN, self.y, wrapped)
                self.y += LINE_HEIGHT

    def finish(self) -> bytes:
        self._draw_footer()
        self.canvas.showPage()
        self.canvas.save()
        return self.buffer.getvalue()

    def _draw_footer(self) -> None:
        self.font(9, color=FOOTER_TEXT)
        self.text(PAGE_WIDTH / 2, PAGE_HEIGHT - 10, self.footer, align="center")


def _footer(company: CompanySnapshot) -> str:
    return f"{company.company_name} • Generated with IndiePilot"


def _header(page: _Page, company: CompanySnapshot, badge: str, badge_width: float, color) -> None:
    badge_x = PAGE_WIDTH - MARGIN - badge_width
    page.rect(badge_x, page.y, badge_width, 20, color)
    page.font(14, bold=True, color=colors.white)
    page.text(badge_x + badge_width / 2, page.y + 13, badge, align="center")

    page.font(20, bold=True)
    page.text(MARGIN, page.y + 10, company.company_name)
    page.y += 30


def _party_panels(page: _Page, left_title: str, left: list[str], right_title: str, right: list[str]) -> None:
    half = (PAGE_WIDTH - 2 * MARGIN) / 2
    page.rect(MARGIN, page.y, half - 5, 35, PANEL_FILL)
    page.rect(MARGIN + half + 5, page.y, half - 5, 35, PANEL_FILL)

    for x, title, lines in ((MARGIN + 5, left_title, left), (MARGIN + half + 10, right_title, right)):
        page.font(11, bold=True)
        page.text(x, page.y + 8, title)
        page.font(10)
        for offset, value in enumerate(line for line in lines if line):
            page.text(x, page.y + 15 + offset * LINE_HEIGHT, value)
    page.y += 45


def _company_lines(company: CompanySnapshot) -> list[str]:
    contact = " | ".join(part for part in (company.email, company.phone) if part)
    return [company.company_name, company.address or "", contact]


def _quantity(value: Decimal) -> str:
    return f"{value.normalize():f}"


def render_invoice_pdf(invoice: Invoice) -> bytes:
    """Render `invoice` as a one-or-more page A4 PDF."""
    company = invoice.company_profile
    color = brand_color(company.brand_color)
    page = _Page(title=invoice.invoice_number, footer=_footer(company))

    _header(page, company, "INVOICE", 50, color)

    page.font(10, color=MUTED_TEXT)
    right = PAGE_WIDTH - MARGIN
    page.text(right, page.y, f"Invoice No: {invoice.invoice_number}", align="right")
    page.text(right, page.y + 5, f"Issue Date: {invoice.issue_date.isoformat()}", align="right")
    page.text(right, page.y + 10, f"Due Date: {invoice.due_date.isoformat()}", align="right")
    page.font(10)
    for offset, value in enumerate(v for v in (company.address, company.email, company.phone) if v):
        page.text(MARGIN, page.y + offset * LINE_HEIGHT, value)
    page.y += 30

    _party_panels(
        page,
        "BILL FROM", _company_lines(company),
        "BILL TO", [invoice.client_name, invoice.client_address or "", invoice.client_email],
    )

    def table_header() -> None:
        page.rect(MARGIN, page.y, PAGE_WIDTH - 2 * MARGIN, 10, color)
        page.font(10, bold=True, color=colors.white)
        page.text(MARGIN + 5, page.y + 7, "Description")
        page.text(PAGE_WIDTH - 80, page.y + 7, "Qty")
        page.text(PAGE_WIDTH - 60, page.y + 7, "Rate")
        page.text(PAGE_WIDTH - MARGIN - 5, page.y + 7, "Amount", align="right")
        page.y += 10

    table_header()
    description_width = (PAGE_WIDTH - 80 - MARGIN - 10) * mm
    for index, item in enumerate(invoice.items):
        if page.y + 10 > PAGE_HEIGHT - 30:
            page.new_page()
            table_header()
        if index % 2 == 0:
            page.rect(MARGIN, page.y, PAGE_WIDTH - 2 * MARGIN, 10, ZEBRA_FILL)
        page.font(10)
        description = (simpleSplit(item.description, "Helvetica", 10, description_width) or [""])[0]
        page.text(MARGIN + 5, page.y + 7, description)
        page.text(PAGE_WIDTH - 80, page.y + 7, _quantity(item.quantity))
        page.text(PAGE_WIDTH - 60, page.y + 7, format_money(item.rate))
        page.text(PAGE_WIDTH - MARGIN - 5, page.y + 7, format_money(item.amount), align="right")
        page.y += 10

    page.ensure_room(30)
    page.y += 5
    totals_x = PAGE_WIDTH - 70
    page.font(10)
    page.text(totals_x, page.y, "Subtotal:")
    page.text(right, page.y, format_money(invoice.subtotal), align="right")
    page.y += 7
    if invoice.tax_rate > 0:
        page.text(totals_x, page.y, f"Tax ({_quantity(invoice.tax_rate)}%):")
        page.text(right, page.y, format_money(invoice.tax), align="right")
        page.y += 7
    page.line(totals_x - 5, right, page.y - 2, color)
    page.font(12, bold=True)
    page.text(totals_x, page.y + 5, "Total:")
    page.text(right, page.y + 5, format_money(invoice.total), align="right")
    page.y += 20

    for title, body in (("Notes", invoice.notes), ("Terms & Conditions", invoice.terms)):
        if not body:
            continue
        page.ensure_room(15)
        page.font(11, bold=True)
        page.text(MARGIN, page.y, title)
        page.y += LINE_HEIGHT
        page.paragraph(body)
        page.y += LINE_HEIGHT

    return page.finish()


def render_contract_pdf(contract: ContractDocument, company: CompanySnapshot) -> bytes:
    """Render a service agreement between `company` and the contract's client."""
    color = brand_color(company.brand_color)
    page = _Page(title=contract.contract_number, footer=_footer(company))

    _header(page, company, "AGREEMENT", 60, color)

    page.font(10, color=MUTED_TEXT)
    right = PAGE_WIDTH - MARGIN
    page.text(right, page.y, f"Contract No: {contract.contract_number}", align="right")
    page.text(right, page.y + 5, f"Issue Date: {contract.issue_date.isoformat()}", align="right")
    page.y += 20

    _party_panels(
        page,
        "COMPANY", _company_lines(company),
        "CLIENT", [contract.client_name, contract.client_email or "", contract.client_address or ""],
    )

    sections = (
        ("SCOPE OF WORK", contract.scope_of_work),
        ("COMPENSATION", contract.rate_label),
        ("TERMS & CONDITIONS", contract.terms),
        ("ADDITIONAL NOTES", contract.notes),
    )
    for title, body in sections:
        if not body:
            continue
        page.ensure_room(15)
        page.font(12, bold=True)
        page.text(MARGIN, page.y, title)
        page.y += 7
        page.paragraph(body)
        page.y += 10

    return page.finish()
