"""Authenticated user id carried through a request via a ContextVar."""

from contextlib import contextmanager
from contextvars import ContextVar
from uuid import UUID

_current_user_id: ContextVar[UUID | None] = ContextVar("current_user_id", default=None)


def get_current_user_id() -> UUID:
    """
    User id of the authenticated caller.

    Raises:
        RuntimeError: If called outside an authenticated request or
            a `user_context` block
    """
    user_id = _current_user_id.get()
    if user_id is None:
        raise RuntimeError("No authenticated user in context")
    return user_id


def peek_current_user_id() -> UUID | None:
    """User id if one is set, otherwise None. For logging only."""
    return _current_user_id.get()


def set_current_user_id(user_id: UUID) -> None:
    """Bind the caller for the rest of this request. Set by AuthMiddleware."""
    _current_user_id.set(user_id)


def clear_current_user_id() -> None:
    """Drop the binding. AuthMiddleware calls this in its finally block."""
    _current_user_id.set(None)


@contextmanager
def user_context(user_id: UUID):
    """
    Act as `user_id` inside the block, restoring the previous caller after.

    The public payment page uses this to settle an invoice on behalf of
    its owner; tests use it to scope service calls.
    """
    token = _current_user_id.set(user_id)
    try:
        yield user_id
    finally:
        _current_user_id.reset(token)
