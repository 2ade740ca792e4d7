"""
Invoice number minting.

Numbers are `<prefix>-<5-digit sequence>` from a per-user counter. When the
counter store is down the number falls back to `<prefix>-<epoch ms>` so an
invoice can still be created; such numbers are unique in practice but break
the sequence.
"""

import logging
from uuid import UUID

from core.exceptions import CounterUnavailableError
from core.repositories import CounterRepository
from utils.timezone import epoch_millis

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 5


def format_invoice_number(prefix: str, value: int) -> str:
    return f"{prefix}-{value:0{SEQUENCE_WIDTH}d}"


class InvoiceCounter:
    """Per-user monotonic invoice sequence."""

    def __init__(self, counters: CounterRepository):
        self.counters = counters

    def next_invoice_number(self, user_id: UUID, prefix: str) -> str:
        """
        Claim the next number for `user_id`.

        Never raises for an unreachable counter store; see module docstring.
        """
        try:
            value = self.counters.increment(user_id)
        except CounterUnavailableError as e:
            fallback = f"{prefix}-{epoch_millis()}"
            logger.warning(f"Invoice counter unavailable for user {user_id}, using {fallback}: {e}")
            return fallback
        return format_invoice_number(prefix, value)
