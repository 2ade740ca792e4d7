"""Unified API response envelope and error codes."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from api.middleware import current_request_id
from utils.timezone import now_utc


class APIError(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    field: str | None = Field(None, description="Offending input field, for validation errors")


class APIMeta(BaseModel):
    timestamp: datetime = Field(..., description="Response timestamp (UTC)")
    request_id: str = Field(..., description="Request identifier, echoed in X-Request-ID")


class APIResponse(BaseModel):
    """Every endpoint answers with this shape."""

    success: bool
    data: Any | None = None
    error: APIError | None = None
    meta: APIMeta


def _meta() -> APIMeta:
    return APIMeta(timestamp=now_utc(), request_id=current_request_id())


def success_response(data: Any) -> APIResponse:
    return APIResponse(success=True, data=data, meta=_meta())


def error_response(code: str, message: str, field: str | None = None) -> APIResponse:
    return APIResponse(success=False, error=APIError(code=code, message=message, field=field), meta=_meta())


class ErrorCodes:
    """Error codes returned in `error.code`."""

    # Authentication
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    RATE_LIMITED = "RATE_LIMITED"
    USER_INACTIVE = "USER_INACTIVE"

    # Resources
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"

    # Invoice lifecycle
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    EMAIL_SEND_FAILED = "EMAIL_SEND_FAILED"
    PAYMENT_REJECTED = "PAYMENT_REJECTED"

    # Infrastructure
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
