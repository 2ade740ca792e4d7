"""Session validation middleware that binds the caller's user id."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from api.base import ErrorCodes, error_response
from auth.exceptions import SessionExpiredError
from auth.session import SessionManager
from utils.user_context import clear_current_user_id, set_current_user_id

SESSION_COOKIE = "session_token"


class AuthMiddleware(BaseHTTPMiddleware):
    """
    For protected routes, reads the 'session_token' cookie, validates it and
    binds the user id for the request. Public paths pass straight through.
    """

    PUBLIC_PATHS = [
        "/auth/register",
        "/auth/login",
        "/auth/logout",
        "/auth/request-reset",
        "/auth/reset-password",
        "/pay/",
        "/health",
        "/docs",
        "/openapi.json",
    ]

    def __init__(self, app, session_manager: SessionManager):
        super().__init__(app)
        self._session_manager = session_manager

    def _is_public_path(self, path: str) -> bool:
        return any(path == public or path.startswith(public) for public in self.PUBLIC_PATHS)

    @staticmethod
    def _unauthorized(code: str, message: str) -> JSONResponse:
        return JSONResponse(status_code=401, content=error_response(code, message).model_dump(mode="json"))

    async def dispatch(self, request: Request, call_next):
        if self._is_public_path(request.url.path):
            return await call_next(request)

        session_token = request.cookies.get(SESSION_COOKIE)
        if not session_token:
            return self._unauthorized(ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

        try:
            session = self._session_manager.validate_session(session_token)
        except SessionExpiredError:
            return self._unauthorized(ErrorCodes.SESSION_EXPIRED, "Session has expired")

        set_current_user_id(session.user_id)
        request.state.user_id = session.user_id
        request.state.session = session
        try:
            return await call_next(request)
        finally:
            clear_current_user_id()
