"""
Valkey (Redis-compatible) client for sessions, login throttling and
password-reset tokens.

Connection failures propagate; callers never get a silent default.
"""

import json
import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    Small wrapper over redis-py with string values and JSON helpers.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        client.set_json("session:abc", {"user_id": "..."}, expire_seconds=3600)
        data = client.get_json("session:abc")
    """

    def __init__(self, url: str):
        """
        Connect and ping.

        Raises:
            redis.ConnectionError: If Valkey is unreachable
        """
        self._client = redis.from_url(url, decode_responses=True)
        self._client.ping()
        logger.info("ValkeyClient connected")

    def ping(self) -> bool:
        self._client.ping()
        return True

    def get(self, key: str) -> str | None:
        return self._client.get(key)

    def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        """Store `value`; with `expire_seconds` the key disappears after that TTL."""
        if expire_seconds is not None:
            self._client.setex(key, expire_seconds, value)
        else:
            self._client.set(key, value)

    def pop(self, key: str) -> str | None:
        """Read and delete in one round trip. Used for single-use tokens."""
        return self._client.getdel(key)

    def delete(self, key: str) -> bool:
        """True if the key existed."""
        return self._client.delete(key) > 0

    def exists(self, key: str) -> bool:
        return self._client.exists(key) > 0

    def ttl(self, key: str) -> int:
        """Remaining seconds; -2 when missing, -1 when the key never expires."""
        return self._client.ttl(key)

    def expire(self, key: str, seconds: int) -> bool:
        """Reset the TTL. False when the key does not exist."""
        return bool(self._client.expire(key, seconds))

    def incr(self, key: str) -> int:
        return self._client.incr(key)

    def set_json(self, key: str, value: dict | list, expire_seconds: int | None = None) -> None:
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key: str) -> dict | list | None:
        """
        Deserialized value or None when missing.

        Raises:
            ValueError: If the stored value is not JSON
        """
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in key '{key}': {e}") from e

    def close(self) -> None:
        self._client.close()
        logger.info("ValkeyClient closed")
