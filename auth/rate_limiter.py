"""Login throttling per email.

Every attempt restarts the window, so repeated guessing keeps the account
locked for as long as it continues.
"""

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.exceptions import RateLimitedError


class RateLimiter:
    KEY_PREFIX = "indiepilot:ratelimit:login:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._max_attempts = config.login_rate_limit_attempts
        self._window_seconds = config.login_rate_limit_window_minutes * 60

    def _key(self, email: str) -> str:
        return f"{self.KEY_PREFIX}{email.strip().lower()}"

    def check_rate_limit(self, email: str) -> None:
        """
        Count an attempt for `email`.

        Raises:
            RateLimitedError: Attempts in the current window exceed the limit
        """
        key = self._key(email)
        count = self._valkey.incr(key)
        self._valkey.expire(key, self._window_seconds)

        if count > self._max_attempts:
            raise RateLimitedError(retry_after_seconds=max(self._valkey.ttl(key), 1))

    def reset_rate_limit(self, email: str) -> None:
        """Clear the counter after a successful login."""
        self._valkey.delete(self._key(email))

    def get_remaining_attempts(self, email: str) -> int:
        current = self._valkey.get(self._key(email))
        used = int(current) if current is not None else 0
        return max(self._max_attempts - used, 0)
