"""
PostgreSQL client with a shared connection pool and row-level security.

Every connection handed out has `app.current_user_id` set, either from the
explicit `user_id` a repository passes or from the request context. With no
user at all the setting is blank and RLS policies return no rows.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, List, Tuple
from uuid import UUID

import psycopg2
import psycopg2.extras
import psycopg2.pool

from core.exceptions import StoreUnavailableError
from utils.user_context import peek_current_user_id

logger = logging.getLogger(__name__)

_adapters_registered = False

Params = Tuple | Dict | None


class DatabaseUnavailableError(StoreUnavailableError):
    """Postgres refused or dropped the connection."""


class PostgresClient:
    """
    Thin query helper over a ThreadedConnectionPool.

    Pools are shared per DSN across instances so handlers and services can
    each hold a client without multiplying connections.

    Usage:
        db = PostgresClient(database_url)
        rows = db.execute("SELECT * FROM invoices WHERE user_id = %s", (uid,), user_id=uid)
    """

    _connection_pools: Dict[str, psycopg2.pool.ThreadedConnectionPool] = {}
    _pools_lock = threading.RLock()

    def __init__(self, database_url: str, min_connections: int = 2, max_connections: int = 20):
        self._database_url = database_url
        self._min_connections = min_connections
        self._max_connections = max_connections
        self._ensure_connection_pool()

    def _ensure_connection_pool(self) -> psycopg2.pool.ThreadedConnectionPool:
        global _adapters_registered
        with self._pools_lock:
            pool = self._connection_pools.get(self._database_url)
            if pool is not None:
                return pool

            try:
                pool = psycopg2.pool.ThreadedConnectionPool(
                    minconn=self._min_connections,
                    maxconn=self._max_connections,
                    dsn=self._database_url,
                    connect_timeout=10,
                )
            except psycopg2.OperationalError as e:
                raise DatabaseUnavailableError(f"Could not connect to database: {e}") from e

            if not _adapters_registered:
                psycopg2.extras.register_default_jsonb(globally=True)
                psycopg2.extras.register_uuid()
                _adapters_registered = True

            self._connection_pools[self._database_url] = pool
            logger.info(f"Connection pool created ({self._min_connections}-{self._max_connections})")
            return pool

    @contextmanager
    def get_connection(self, user_id: UUID | None = None):
        """
        Borrow a connection scoped to `user_id` (or the request's user).

        Raises:
            DatabaseUnavailableError: If no connection can be obtained
        """
        pool = self._ensure_connection_pool()
        scope = user_id or peek_current_user_id()

        try:
            conn = pool.getconn()
        except (psycopg2.OperationalError, psycopg2.pool.PoolError) as e:
            raise DatabaseUnavailableError(f"Database connection unavailable: {e}") from e

        try:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT set_config('app.current_user_id', %s, false)",
                    (str(scope) if scope else "",),
                )
            yield conn
        except psycopg2.OperationalError as e:
            conn.rollback()
            raise DatabaseUnavailableError(f"Database connection lost: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            pool.putconn(conn)

    def execute(self, query: str, params: Params = None, user_id: UUID | None = None) -> List[Dict[str, Any]]:
        """Run a statement and return rows as dicts. Writes are committed."""
        with self.get_connection(user_id) as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                cur.execute(query, params)
                rows = [dict(row) for row in cur.fetchall()] if cur.description else []
            conn.commit()
            return rows

    def execute_single(self, query: str, params: Params = None, user_id: UUID | None = None) -> Dict[str, Any] | None:
        """First row or None."""
        rows = self.execute(query, params, user_id=user_id)
        return rows[0] if rows else None

    def execute_scalar(self, query: str, params: Params = None, user_id: UUID | None = None) -> Any:
        """First column of the first row or None."""
        row = self.execute_single(query, params, user_id=user_id)
        return next(iter(row.values())) if row else None

    def close(self) -> None:
        with self._pools_lock:
            pool = self._connection_pools.pop(self._database_url, None)
            if pool is not None:
                pool.closeall()

    @classmethod
    def close_all_pools(cls) -> None:
        with cls._pools_lock:
            for pool in cls._connection_pools.values():
                pool.closeall()
            cls._connection_pools.clear()
