"""HTTP routes for authentication."""

import ipaddress

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from api.base import ErrorCodes, error_response, success_response
from auth.config import AuthConfig
from auth.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    InvalidTokenError,
    RateLimitedError,
    UserInactiveError,
    WeakPasswordError,
)
from auth.security_middleware import SESSION_COOKIE
from auth.service import AuthService
from auth.types import AuthenticatedUser, Credentials, PasswordResetConfirm, PasswordResetRequest
from clients.email_client import EmailGatewayError


def _get_client_ip(request: Request) -> str | None:
    """Client IP if it parses as one, else None."""
    if not request.client:
        return None
    host = request.client.host
    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        return None


def _error(status_code: int, code: str, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content=error_response(code, message).model_dump(mode="json"),
    )


def create_auth_router(auth_service: AuthService, config: AuthConfig) -> APIRouter:
    router = APIRouter(tags=["auth"])

    def _open_session(response: Response, result: AuthenticatedUser) -> dict:
        response.set_cookie(
            key=SESSION_COOKIE,
            value=result.session.token,
            httponly=True,
            secure=config.cookie_secure,
            samesite="lax",
            max_age=int((result.session.expires_at - result.session.created_at).total_seconds()),
        )
        return success_response({"user": result.user.model_dump(mode="json")}).model_dump(mode="json")

    @router.post("/register")
    async def register(request: Request, response: Response, body: Credentials):
        try:
            result = auth_service.register(body.email, body.password, ip_address=_get_client_ip(request))
        except WeakPasswordError as e:
            return _error(400, ErrorCodes.VALIDATION_ERROR, str(e))
        except EmailAlreadyRegisteredError:
            return _error(409, ErrorCodes.ALREADY_EXISTS, "An account with this email already exists")
        return _open_session(response, result)

    @router.post("/login")
    async def login(request: Request, response: Response, body: Credentials):
        try:
            result = auth_service.login(
                body.email,
                body.password,
                ip_address=_get_client_ip(request),
                user_agent=request.headers.get("User-Agent"),
            )
        except RateLimitedError as e:
            return _error(
                429,
                ErrorCodes.RATE_LIMITED,
                f"Too many attempts. Please wait {e.retry_after_seconds} seconds.",
                headers={"Retry-After": str(e.retry_after_seconds)},
            )
        except InvalidCredentialsError:
            return _error(401, ErrorCodes.INVALID_CREDENTIALS, "Invalid email or password")
        except UserInactiveError:
            return _error(403, ErrorCodes.USER_INACTIVE, "Account is deactivated")
        return _open_session(response, result)

    @router.post("/logout")
    async def logout(request: Request, response: Response):
        session_token = request.cookies.get(SESSION_COOKIE)
        if session_token:
            auth_service.logout(session_token, ip_address=_get_client_ip(request))
        response.delete_cookie(key=SESSION_COOKIE)
        return success_response({"message": "Logged out successfully"}).model_dump(mode="json")

    @router.get("/me")
    async def me(request: Request):
        """Requires a session; AuthMiddleware has bound request.state.user_id."""
        user = auth_service.get_user(request.state.user_id)
        if user is None:
            return _error(401, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")
        return success_response({"user": user.model_dump(mode="json")}).model_dump(mode="json")

    @router.post("/request-reset")
    async def request_reset(request: Request, body: PasswordResetRequest):
        try:
            auth_service.request_password_reset(body.email, ip_address=_get_client_ip(request))
        except EmailGatewayError:
            return _error(502, ErrorCodes.EMAIL_SEND_FAILED, "Could not send reset email, try again later")
        return success_response(
            {"message": "If an account exists for that email, a reset link has been sent"}
        ).model_dump(mode="json")

    @router.post("/reset-password")
    async def reset_password(request: Request, body: PasswordResetConfirm):
        try:
            auth_service.reset_password(body.token, body.new_password, ip_address=_get_client_ip(request))
        except WeakPasswordError as e:
            return _error(400, ErrorCodes.VALIDATION_ERROR, str(e))
        except InvalidTokenError:
            return _error(400, ErrorCodes.INVALID_TOKEN, "Invalid or expired reset token")
        return success_response({"message": "Password updated"}).model_dump(mode="json")

    return router
