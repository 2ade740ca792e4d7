"""Tests for the audit trail."""

from unittest.mock import Mock
from uuid import uuid4

import pytest
from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from core.audit import AuditAction, AuditLogger, compute_changes


class TestAuditAction:
    def test_values(self):
        assert AuditAction.CREATE.value == "create"
        assert AuditAction.UPDATE.value == "update"
        assert AuditAction.STATUS_CHANGE.value == "status_change"


class TestComputeChanges:
    """Tests for compute_changes utility function."""

    def test_detects_changed_fields(self):
        changes = compute_changes(
            {"name": "Acme", "email": "a@acme.com"},
            {"name": "Acme", "email": "b@acme.com"},
        )
        assert changes == {"email": {"old": "a@acme.com", "new": "b@acme.com"}}

    def test_detects_added_and_removed_fields(self):
        changes = compute_changes({"phone": "555"}, {"address": "1 Main St"})
        assert changes["phone"] == {"old": "555", "new": None}
        assert changes["address"] == {"old": None, "new": "1 Main St"}

    def test_excludes_updated_at_by_default(self):
        assert compute_changes({"updated_at": 1}, {"updated_at": 2}) == {}

    def test_custom_exclude_fields(self):
        changes = compute_changes({"a": 1, "b": 1}, {"a": 2, "b": 2}, exclude_fields={"b"})
        assert list(changes) == ["a"]

    def test_empty_when_no_changes(self):
        assert compute_changes({"name": "Acme"}, {"name": "Acme"}) == {}


@pytest.fixture
def postgres():
    return Mock(spec=PostgresClient)


class TestAuditLogger:
    """AuditLogger against a mocked PostgresClient."""

    def test_log_change_inserts_row(self, postgres, as_test_user, test_user_id):
        entity_id = uuid4()

        AuditLogger(postgres).log_change(
            entity_type="invoice",
            entity_id=entity_id,
            action=AuditAction.STATUS_CHANGE,
            changes={"status": {"old": "sent", "new": "paid"}},
        )

        query, params = postgres.execute.call_args.args
        assert "INSERT INTO audit_log" in query
        assert params[1] == test_user_id
        assert params[2] == "invoice"
        assert params[3] == str(entity_id)
        assert params[4] == "status_change"
        assert isinstance(params[5], Json)

    def test_explicit_user_overrides_context(self, postgres, as_test_user, test_user_b_id):
        AuditLogger(postgres).log_change("invoice", uuid4(), AuditAction.CREATE, {}, user_id=test_user_b_id)
        assert postgres.execute.call_args.args[1][1] == test_user_b_id

    def test_requires_user(self, postgres):
        with pytest.raises(RuntimeError):
            AuditLogger(postgres).log_change("invoice", uuid4(), AuditAction.CREATE, {})

    def test_get_entity_history(self, postgres):
        postgres.execute.return_value = [{"action": "update"}, {"action": "create"}]
        entity_id = uuid4()

        history = AuditLogger(postgres).get_entity_history("invoice", entity_id)

        assert [h["action"] for h in history] == ["update", "create"]
        query, params = postgres.execute.call_args.args
        assert "ORDER BY created_at DESC" in query
        assert params == ("invoice", str(entity_id))
