"""Database operations for authentication.

The users table has no RLS: it is read before any user context exists.
"""

from uuid import UUID

from clients.postgres_client import PostgresClient
from auth.types import User
from utils.timezone import now_utc

_USER_COLUMNS = "id, email, role, is_active, created_at, last_login_at"


class AuthDatabase:
    """User rows and password hashes."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def get_user_by_email(self, email: str) -> User | None:
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS} FROM users WHERE email = lower(%s)",
            (email,),
        )
        return User.model_validate(row) if row else None

    def get_user_by_id(self, user_id: UUID) -> User | None:
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            (user_id,),
        )
        return User.model_validate(row) if row else None

    def get_credentials(self, email: str) -> tuple[User, str] | None:
        """User and stored password hash, or None for an unknown email."""
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS}, password_hash FROM users WHERE email = lower(%s)",
            (email,),
        )
        if row is None:
            return None
        password_hash = row.pop("password_hash")
        return User.model_validate(row), password_hash

    def create_user(self, email: str, password_hash: str) -> User | None:
        """
        Insert a user with role 'user'.

        Returns:
            The new user, or None if the email is already taken
        """
        row = self._db.execute_single(
            f"""INSERT INTO users (email, password_hash, role, created_at)
                VALUES (lower(%s), %s, 'user', %s)
                ON CONFLICT (email) DO NOTHING
                RETURNING {_USER_COLUMNS}""",
            (email, password_hash, now_utc()),
        )
        return User.model_validate(row) if row else None

    def update_password(self, user_id: UUID, password_hash: str) -> bool:
        rows = self._db.execute(
            "UPDATE users SET password_hash = %s WHERE id = %s RETURNING id",
            (password_hash, user_id),
        )
        return len(rows) > 0

    def update_last_login(self, user_id: UUID) -> None:
        self._db.execute(
            "UPDATE users SET last_login_at = %s WHERE id = %s RETURNING id",
            (now_utc(), user_id),
        )

    def set_active(self, user_id: UUID, active: bool) -> bool:
        """Freeze or unfreeze login. False if the user does not exist."""
        rows = self._db.execute(
            "UPDATE users SET is_active = %s WHERE id = %s RETURNING id",
            (active, user_id),
        )
        return len(rows) > 0
