"""Line-item and invoice total arithmetic.

All amounts are Decimal, rounded half-up to whole cents.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from pydantic import BaseModel

from core.models.invoice import LineItem, LineItemInput

CENT = Decimal("0.01")


def to_cents(value: Decimal | int | float | str) -> Decimal:
    """Quantize to cents. Floats go through str() to avoid binary artifacts."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def price_line(item: LineItemInput) -> LineItem:
    """Line with amount = quantity x rate."""
    return LineItem(
        description=item.description.strip(),
        quantity=item.quantity,
        rate=item.rate,
        amount=to_cents(item.quantity * item.rate),
    )


def is_billable(item: LineItem) -> bool:
    """Non-empty description and a positive amount."""
    return bool(item.description) and item.amount > 0


class InvoiceTotals(BaseModel):
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def compute_totals(items: Iterable[LineItem], tax_rate: Decimal) -> InvoiceTotals:
    """
    subtotal = sum of line amounts, tax = subtotal x rate / 100,
    total = subtotal + tax.
    """
    subtotal = to_cents(sum((item.amount for item in items), Decimal("0")))
    tax = to_cents(subtotal * Decimal(tax_rate) / Decimal("100"))
    return InvoiceTotals(subtotal=subtotal, tax=tax, total=subtotal + tax)


def format_money(amount: Decimal) -> str:
    """'$1,234.50' style display string."""
    return f"${to_cents(amount):,.2f}"
