"""Postgres-backed income ledger."""

from decimal import Decimal
from uuid import UUID

from clients.postgres_client import PostgresClient
from core.models import IncomeEntry, IncomeEntryCreate
from utils.timezone import now_utc

_COLUMNS = "id, user_id, amount, description, date, category, invoice_reference, created_at"


class PostgresLedgerRepository:
    """
    income_entries access. Insert and read only.

    A partial unique index on (user_id, invoice_reference) backs the
    one-entry-per-invoice rule; a conflicting insert returns the entry
    that already exists.
    """

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def add(self, user_id: UUID, data: IncomeEntryCreate) -> IncomeEntry:
        row = self.postgres.execute_single(
            f"""
            INSERT INTO income_entries (user_id, amount, description, date, category, invoice_reference, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (user_id, invoice_reference) WHERE invoice_reference IS NOT NULL DO NOTHING
            RETURNING {_COLUMNS}
            """,
            (
                user_id,
                data.amount,
                data.description,
                data.date,
                data.category.value,
                data.invoice_reference,
                now_utc(),
            ),
            user_id=user_id,
        )
        if row is None:
            # Lost a race with another writer for the same invoice
            return self.find_by_reference(user_id, data.invoice_reference)
        return IncomeEntry.model_validate(row)

    def find_by_reference(self, user_id: UUID, reference: str) -> IncomeEntry | None:
        row = self.postgres.execute_single(
            f"SELECT {_COLUMNS} FROM income_entries WHERE user_id = %s AND invoice_reference = %s",
            (user_id, reference),
            user_id=user_id,
        )
        return IncomeEntry.model_validate(row) if row else None

    def list_recent(self, user_id: UUID, limit: int) -> list[IncomeEntry]:
        rows = self.postgres.execute(
            f"""
            SELECT {_COLUMNS} FROM income_entries
            WHERE user_id = %s
            ORDER BY date DESC, created_at DESC
            LIMIT %s
            """,
            (user_id, limit),
            user_id=user_id,
        )
        return [IncomeEntry.model_validate(row) for row in rows]

    def total(self, user_id: UUID) -> Decimal:
        value = self.postgres.execute_scalar(
            "SELECT COALESCE(SUM(amount), 0) AS total FROM income_entries WHERE user_id = %s",
            (user_id,),
            user_id=user_id,
        )
        return Decimal(value)
