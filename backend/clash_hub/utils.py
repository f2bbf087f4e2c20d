from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def format_count(value: int | float | None) -> str:
    """Whole number with thousands separators; missing values render as 0."""
    try:
        return f"{int(value or 0):,}"
    except (TypeError, ValueError):
        return "0"
