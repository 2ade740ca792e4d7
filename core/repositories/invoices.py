"""Postgres-backed invoice store."""

from uuid import UUID

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from core.models import Invoice, InvoiceCreate, InvoiceStatus, InvoiceTransition
from utils.timezone import now_utc

_COLUMNS = """
    id, user_id, invoice_number, client_name, client_email, client_address,
    issue_date, due_date, items, subtotal, tax_rate, tax, total, notes, terms,
    status, payment_link, company_profile,
    created_at, updated_at, sent_at, viewed_at, paid_at
"""

# Stored status mapped onto the lifecycle rank, so UPDATEs can refuse to move backwards
_STATUS_RANK_SQL = "(CASE status {} END)".format(
    " ".join(f"WHEN '{status.value}' THEN {status.rank}" for status in InvoiceStatus)
)


class PostgresInvoiceRepository:
    """
    Invoices table access. Ids come from the table default; rows are never
    deleted.
    """

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def add(self, user_id: UUID, data: InvoiceCreate) -> Invoice:
        now = now_utc()
        row = self.postgres.execute_single(
            f"""
            INSERT INTO invoices (
                user_id, invoice_number, client_name, client_email, client_address,
                issue_date, due_date, items, subtotal, tax_rate, tax, total,
                notes, terms, status, company_profile, created_at, updated_at
            ) VALUES (
                %s, %s, %s, %s, %s,
                %s, %s, %s, %s, %s, %s, %s,
                %s, %s, %s, %s, %s, %s
            )
            RETURNING {_COLUMNS}
            """,
            (
                user_id, data.invoice_number, data.client_name, data.client_email, data.client_address,
                data.issue_date, data.due_date,
                Json([item.model_dump(mode="json") for item in data.items]),
                data.subtotal, data.tax_rate, data.tax, data.total,
                data.notes, data.terms, data.status.value,
                Json(data.company_profile.model_dump(mode="json")),
                now, now,
            ),
            user_id=user_id,
        )
        return Invoice.model_validate(row)

    def get(self, user_id: UUID, invoice_id: UUID) -> Invoice | None:
        row = self.postgres.execute_single(
            f"SELECT {_COLUMNS} FROM invoices WHERE id = %s AND user_id = %s",
            (invoice_id, user_id),
            user_id=user_id,
        )
        return Invoice.model_validate(row) if row else None

    def list(
        self,
        user_id: UUID,
        statuses: set[InvoiceStatus] | None = None,
        exclude_statuses: set[InvoiceStatus] | None = None,
    ) -> list[Invoice]:
        """Newest first, optionally restricted to or excluding some statuses."""
        query = f"SELECT {_COLUMNS} FROM invoices WHERE user_id = %s"
        params: list = [user_id]
        if statuses:
            query += " AND status = ANY(%s)"
            params.append([s.value for s in statuses])
        if exclude_statuses:
            query += " AND NOT (status = ANY(%s))"
            params.append([s.value for s in exclude_statuses])
        query += " ORDER BY created_at DESC"

        rows = self.postgres.execute(query, tuple(params), user_id=user_id)
        return [Invoice.model_validate(row) for row in rows]

    def apply_transition(
        self, user_id: UUID, invoice_id: UUID, transition: InvoiceTransition
    ) -> Invoice | None:
        """
        Write status and its timestamp fields in one UPDATE.

        Timestamps left as None keep their stored value. The row is only
        touched while its stored status ranks at or below the target and is
        not paid; otherwise None is returned and nothing changes.
        """
        row = self.postgres.execute_single(
            f"""
            UPDATE invoices SET
                status = %s,
                sent_at = COALESCE(%s, sent_at),
                viewed_at = COALESCE(%s, viewed_at),
                paid_at = COALESCE(%s, paid_at),
                payment_link = COALESCE(%s, payment_link),
                updated_at = %s
            WHERE id = %s AND user_id = %s
              AND status <> 'paid'
              AND {_STATUS_RANK_SQL} <= %s
            RETURNING {_COLUMNS}
            """,
            (
                transition.status.value,
                transition.sent_at,
                transition.viewed_at,
                transition.paid_at,
                transition.payment_link,
                now_utc(),
                invoice_id,
                user_id,
                transition.status.rank,
            ),
            user_id=user_id,
        )
        return Invoice.model_validate(row) if row else None

    def find_owner(self, invoice_id: UUID) -> UUID | None:
        """
        Owner of an invoice, for the public payment page.

        Goes through the SECURITY DEFINER function invoice_owner(), since
        the caller has no user context and RLS would hide the row.
        """
        return self.postgres.execute_scalar("SELECT invoice_owner(%s) AS owner", (invoice_id,))
