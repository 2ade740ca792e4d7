"""
Append-only audit trail of entity mutations.

Invoices, income entries and company profiles write here on every change.
Rows are never updated or deleted. audit_log carries no RLS policy so the
operator can review the full trail.
"""

from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from utils.timezone import now_utc
from utils.user_context import get_current_user_id


class AuditAction(Enum):
    """Type of change made to an entity."""

    CREATE = "create"
    UPDATE = "update"
    STATUS_CHANGE = "status_change"


def compute_changes(
    old: dict[str, Any],
    new: dict[str, Any],
    exclude_fields: set[str] | None = None,
) -> dict[str, dict[str, Any]]:
    """
    Field-level diff between two JSON-mode dumps.

    Returns:
        {field: {"old": ..., "new": ...}} for each changed field, ignoring
        `exclude_fields` (default {"updated_at"}).
    """
    exclude = exclude_fields if exclude_fields is not None else {"updated_at"}
    return {
        key: {"old": old.get(key), "new": new.get(key)}
        for key in sorted(set(old) | set(new))
        if key not in exclude and old.get(key) != new.get(key)
    }


class AuditLogger:
    """
    Writes audit rows. Pass pydantic data through model_dump(mode="json")
    so UUIDs, dates and Decimals serialize.

    Usage:
        audit.log_change(
            entity_type="invoice",
            entity_id=invoice.id,
            action=AuditAction.STATUS_CHANGE,
            changes={"status": {"old": "sent", "new": "paid"}},
        )
    """

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def log_change(
        self,
        entity_type: str,
        entity_id: UUID | str,
        action: AuditAction,
        changes: dict[str, Any],
        user_id: UUID | None = None,
    ) -> None:
        """
        Record one change.

        Args:
            entity_type: "invoice", "income_entry" or "company_profile"
            entity_id: Id of the changed entity
            action: CREATE, UPDATE or STATUS_CHANGE
            changes: {"created": {...}} for CREATE, a compute_changes diff otherwise
            user_id: Acting user; defaults to the request's user
        """
        if user_id is None:
            user_id = get_current_user_id()

        self.postgres.execute(
            """
            INSERT INTO audit_log (id, user_id, entity_type, entity_id, action, changes, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            (uuid4(), user_id, entity_type, str(entity_id), action.value, Json(changes), now_utc()),
        )

    def get_entity_history(self, entity_type: str, entity_id: UUID | str) -> list[dict[str, Any]]:
        """Audit rows for one entity, newest first."""
        return self.postgres.execute(
            """
            SELECT id, user_id, entity_type, entity_id, action, changes, created_at
            FROM audit_log
            WHERE entity_type = %s AND entity_id = %s
            ORDER BY created_at DESC
            """,
            (entity_type, str(entity_id)),
        )
