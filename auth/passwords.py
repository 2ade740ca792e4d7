"""Password hashing via passlib."""

from passlib.context import CryptContext

from auth.exceptions import WeakPasswordError

_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return _context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time check; False for malformed hashes rather than raising."""
    try:
        return _context.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def check_strength(password: str, min_length: int) -> None:
    """
    Raises:
        WeakPasswordError: Shorter than `min_length` or only whitespace
    """
    if len(password) < min_length or not password.strip():
        raise WeakPasswordError(f"Password must be at least {min_length} characters")
