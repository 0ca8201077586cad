"""UTC datetime helpers for ledger timestamps (unix seconds)."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def from_unix(seconds: int) -> datetime:
    """Contract timestamps are unix seconds; return timezone-aware UTC."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)
