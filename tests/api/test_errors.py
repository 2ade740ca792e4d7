"""Tests for the global exception handlers."""

import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

from api.errors import register_error_handlers
from core.exceptions import (
    InvalidStatusTransitionError,
    InvoiceValidationError,
    NotificationError,
    PaymentRejectedError,
    StoreUnavailableError,
)


@pytest.fixture
def client():
    app = FastAPI()
    register_error_handlers(app)

    errors = {
        "validation": InvoiceValidationError("client_name", "Client name is required"),
        "transition": InvalidStatusTransitionError("paid", "sent"),
        "payment": PaymentRejectedError("Missing payment details: cvv"),
        "notification": NotificationError("Email API error: rejected"),
        "store": StoreUnavailableError("connection refused"),
        "missing": ValueError("Invoice 123 not found"),
        "bad": ValueError("Unknown filter 'x'"),
        "crash": RuntimeError("boom"),
    }

    @app.get("/raise/{name}")
    async def raise_error(name: str):
        raise errors[name]

    return TestClient(app, raise_server_exceptions=False)


@pytest.mark.parametrize("name, status, code", [
    ("validation", 400, "VALIDATION_ERROR"),
    ("transition", 409, "INVALID_STATUS_TRANSITION"),
    ("payment", 400, "PAYMENT_REJECTED"),
    ("notification", 502, "EMAIL_SEND_FAILED"),
    ("store", 503, "SERVICE_UNAVAILABLE"),
    ("missing", 404, "NOT_FOUND"),
    ("bad", 400, "INVALID_REQUEST"),
    ("crash", 500, "INTERNAL_ERROR"),
])
def test_status_and_code(client, name, status, code):
    response = client.get(f"/raise/{name}")

    assert response.status_code == status
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == code


def test_validation_error_names_field(client):
    assert client.get("/raise/validation").json()["error"]["field"] == "client_name"


def test_internal_details_are_hidden(client):
    assert client.get("/raise/store").json()["error"]["message"] == "Service temporarily unavailable"
    assert "boom" not in client.get("/raise/crash").text
