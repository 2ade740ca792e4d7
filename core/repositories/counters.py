"""Per-user invoice sequence backed by a single upserted row."""

from uuid import UUID

from clients.postgres_client import PostgresClient
from core.exceptions import CounterUnavailableError, StoreUnavailableError


class PostgresCounterRepository:
    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def increment(self, user_id: UUID) -> int:
        """
        Claim the next sequence value.

        A single INSERT .. ON CONFLICT statement, so concurrent callers
        serialize on the row lock and never receive the same value.

        Raises:
            CounterUnavailableError: The database could not be reached
        """
        try:
            value = self.postgres.execute_scalar(
                """
                INSERT INTO invoice_counters (user_id, next_value, updated_at)
                VALUES (%s, 2, now())
                ON CONFLICT (user_id) DO UPDATE
                    SET next_value = invoice_counters.next_value + 1,
                        updated_at = now()
                RETURNING next_value - 1 AS issued
                """,
                (user_id,),
                user_id=user_id,
            )
        except StoreUnavailableError as e:
            raise CounterUnavailableError(f"Invoice counter unavailable: {e}") from e
        return int(value)
