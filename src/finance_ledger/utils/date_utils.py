"""Date normalization utilities for statement rows."""

from datetime import datetime, timezone

# Slash-separated dates are always read as US order (MM/DD/YYYY).
_SLASH_PARTS = 3


def normalize_date(raw_date: str) -> str:
    """Rewrite a ``MM/DD/YYYY`` date as ``YYYY-MM-DD``.

    Month and day are zero-padded. Anything that does not split into
    exactly three slash-separated parts is returned unchanged, so ISO dates
    and unexpected literals pass through untouched.

    Args:
        raw_date: Date string as it appears in the export.

    Returns:
        ISO-style date string, or the input unchanged.
    """
    parts = raw_date.split("/")
    if len(parts) == _SLASH_PARTS:
        month, day, year = parts
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    return raw_date


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def date_range(dates: list[str]) -> tuple[str, str]:
    """Return the (earliest, latest) of ISO date strings.

    Args:
        dates: Date strings in ``YYYY-MM-DD`` form.

    Returns:
        Tuple of (start, end); both empty strings when no dates are given.
    """
    if not dates:
        return "", ""
    return min(dates), max(dates)
