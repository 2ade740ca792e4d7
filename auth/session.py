"""Session tokens stored in Valkey.

Each session is one JSON value whose TTL equals the remaining lifetime.
Every successful validation slides the expiry forward.
"""

import secrets
from datetime import timedelta
from uuid import UUID

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.exceptions import SessionExpiredError
from auth.types import Session, UserRole
from utils.timezone import now_utc, parse_iso


class SessionManager:
    KEY_PREFIX = "indiepilot:session:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._config = config
        self._lifetime = timedelta(hours=config.session_expiry_hours)

    def _key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}{token}"

    def _store(self, session: Session) -> None:
        self._valkey.set_json(
            self._key(session.token),
            {
                "user_id": str(session.user_id),
                "role": session.role.value,
                "created_at": session.created_at.isoformat(),
                "expires_at": session.expires_at.isoformat(),
                "last_activity_at": session.last_activity_at.isoformat(),
            },
            expire_seconds=int(self._lifetime.total_seconds()),
        )

    def create_session(self, user_id: UUID, role: UserRole = UserRole.USER) -> Session:
        now = now_utc()
        session = Session(
            token=secrets.token_urlsafe(32),
            user_id=user_id,
            role=role,
            created_at=now,
            expires_at=now + self._lifetime,
            last_activity_at=now,
        )
        self._store(session)
        return session

    def validate_session(self, token: str) -> Session:
        """
        Look up and extend a session.

        Raises:
            SessionExpiredError: Unknown, malformed or expired token
        """
        data = self._valkey.get_json(self._key(token))
        if data is None:
            raise SessionExpiredError("Session not found or expired")

        try:
            expires_at = parse_iso(data["expires_at"])
            user_id = UUID(data["user_id"])
            created_at = parse_iso(data["created_at"])
        except (KeyError, ValueError) as e:
            self._valkey.delete(self._key(token))
            raise SessionExpiredError("Session data is corrupt") from e

        now = now_utc()
        if now > expires_at:
            self._valkey.delete(self._key(token))
            raise SessionExpiredError("Session expired")

        session = Session(
            token=token,
            user_id=user_id,
            role=UserRole(data.get("role", UserRole.USER.value)),
            created_at=created_at,
            expires_at=now + self._lifetime,
            last_activity_at=now,
        )
        self._store(session)
        return session

    def revoke_session(self, token: str) -> None:
        """Delete the session. Unknown tokens are ignored."""
        self._valkey.delete(self._key(token))
