from datetime import datetime, timezone

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Converts a naive datetime to a timezone-aware UTC datetime."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)

def api_iso_z(dt: datetime | None) -> str | None:
    """Formats a datetime into an ISO 8601 string ending in 'Z' for API responses."""
    if dt is None:
        return None
    return to_utc(dt).astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
