"""Global exception handlers mapping domain failures to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.responses import JSONResponse

from api.base import ErrorCodes, error_response
from core.exceptions import (
    InvalidStatusTransitionError,
    InvoiceValidationError,
    NotificationError,
    PaymentRejectedError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)


def _respond(status_code: int, code: str, message: str, field: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, field).model_dump(mode="json"),
    )


def _describe(errors: list[dict]) -> tuple[str, str | None]:
    """First pydantic error as (message, dotted field path)."""
    if not errors:
        return "Invalid request", None
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    return first.get("msg", "Invalid value"), ".".join(loc) or None


def register_error_handlers(app: FastAPI) -> None:
    """Install the handlers on `app`. Most specific exception types win."""

    @app.exception_handler(InvoiceValidationError)
    async def invoice_validation_handler(request: Request, exc: InvoiceValidationError):
        return _respond(400, ErrorCodes.VALIDATION_ERROR, str(exc), exc.field)

    @app.exception_handler(InvalidStatusTransitionError)
    async def transition_handler(request: Request, exc: InvalidStatusTransitionError):
        return _respond(409, ErrorCodes.INVALID_STATUS_TRANSITION, str(exc))

    @app.exception_handler(PaymentRejectedError)
    async def payment_rejected_handler(request: Request, exc: PaymentRejectedError):
        return _respond(400, ErrorCodes.PAYMENT_REJECTED, str(exc))

    @app.exception_handler(NotificationError)
    async def notification_handler(request: Request, exc: NotificationError):
        return _respond(502, ErrorCodes.EMAIL_SEND_FAILED, str(exc))

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
        logger.error(f"Store unavailable on {request.url.path}: {exc}")
        return _respond(503, ErrorCodes.SERVICE_UNAVAILABLE, "Service temporarily unavailable")

    @app.exception_handler(ValidationError)
    async def model_validation_handler(request: Request, exc: ValidationError):
        message, field = _describe(exc.errors())
        return _respond(400, ErrorCodes.VALIDATION_ERROR, message, field)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        message, field = _describe(list(exc.errors()))
        return _respond(400, ErrorCodes.VALIDATION_ERROR, message, field)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        message = str(exc)
        if "not found" in message.lower():
            return _respond(404, ErrorCodes.NOT_FOUND, message)
        return _respond(400, ErrorCodes.INVALID_REQUEST, message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _respond(500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
