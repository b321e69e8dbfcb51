"""Date parsing utilities for job board payloads.

Job boards report posting dates as ISO-8601 strings, RFC-style strings in
structured data, or epoch milliseconds. All results are timezone-aware UTC.
"""

from datetime import datetime, timezone

from dateutil import parser


def parse_posted_at(value: str | int | float | None) -> datetime | None:
    """Parse a posting timestamp into an aware UTC datetime.

    Supports:
    - ISO-8601 strings ("2024-03-01T12:00:00Z", "2024-03-01")
    - free-form dates understood by dateutil ("March 1, 2024")
    - epoch milliseconds (Lever's ``createdAt``)

    Args:
        value: Raw timestamp from the source payload

    Returns:
        Aware datetime, or None when the value is missing or unparseable.
        A bad date never fails a crawl.

    Examples:
        >>> parse_posted_at(1709294400000)
        datetime.datetime(2024, 3, 1, 12, 0, tzinfo=datetime.timezone.utc)
        >>> parse_posted_at("not a date") is None
        True
    """
    if value is None or value == "":
        return None

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    try:
        parsed = parser.parse(str(value))
    except (ValueError, OverflowError, parser.ParserError):
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
