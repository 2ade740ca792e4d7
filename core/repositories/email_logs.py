"""Postgres-backed delivery log for invoice emails."""

from uuid import UUID

from clients.postgres_client import PostgresClient
from core.models import EmailLog, EmailLogCreate
from utils.timezone import now_utc

_COLUMNS = """
    id, user_id, invoice_id, invoice_number, client_email, client_name,
    status, email_id, error, created_at
"""


class PostgresEmailLogRepository:
    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def add(self, data: EmailLogCreate) -> EmailLog:
        row = self.postgres.execute_single(
            f"""
            INSERT INTO email_logs (
                user_id, invoice_id, invoice_number, client_email, client_name,
                status, email_id, error, created_at
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {_COLUMNS}
            """,
            (
                data.user_id, data.invoice_id, data.invoice_number, data.client_email,
                data.client_name, data.status.value, data.email_id, data.error, now_utc(),
            ),
            user_id=data.user_id,
        )
        return EmailLog.model_validate(row)

    def list_for_invoice(self, user_id: UUID, invoice_id: UUID) -> list[EmailLog]:
        rows = self.postgres.execute(
            f"""
            SELECT {_COLUMNS} FROM email_logs
            WHERE user_id = %s AND invoice_id = %s
            ORDER BY created_at DESC
            """,
            (user_id, invoice_id),
            user_id=user_id,
        )
        return [EmailLog.model_validate(row) for row in rows]
