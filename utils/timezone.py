"""UTC-only clock helpers. Timestamps are stored and compared in UTC."""

from datetime import date, datetime, timezone


def now_utc() -> datetime:
    """Current time, timezone-aware, in UTC."""
    return datetime.now(timezone.utc)


def today_utc() -> date:
    """Current calendar date in UTC. Used for issue dates and ledger dates."""
    return now_utc().date()


def epoch_millis(moment: datetime | None = None) -> int:
    """Milliseconds since the Unix epoch for `moment` (default: now)."""
    moment = moment or now_utc()
    return int(moment.timestamp() * 1000)


def parse_iso(iso_string: str) -> datetime:
    """
    Parse an ISO 8601 timestamp into a UTC datetime.

    Raises:
        ValueError: If the string is malformed or carries no offset
    """
    parsed = datetime.fromisoformat(iso_string)
    if parsed.tzinfo is None:
        raise ValueError(
            f"Timestamp '{iso_string}' has no timezone offset (expected e.g. 'Z' or '+00:00')"
        )
    return parsed.astimezone(timezone.utc)
