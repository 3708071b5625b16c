from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp such as CoinGecko's "2024-03-01T12:00:00.000Z".
    Naive values are assumed UTC. Raises ValueError on anything else.
    """
    if not isinstance(value, str):
        raise ValueError(f"Invalid timestamp value {value!r}")

    normalized = value.strip().replace("Z", "+00:00")
    if not normalized:
        raise ValueError("Invalid timestamp value ''")

    try:
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid timestamp value '{value}'") from exc

    return ensure_utc(dt)
