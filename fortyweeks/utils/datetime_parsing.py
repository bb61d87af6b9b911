"""Datetime helpers for stored timestamps and public timeline output."""

from __future__ import annotations

from datetime import date, datetime, timezone

# Accepted inputs for timeline sort dates, tried in order after ISO 8601.
TIMELINE_DATETIME_FORMATS: list[str] = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
]

DATE_FORMAT = "%Y-%m-%d"


def utc_now() -> datetime:
    """Current time as naive UTC (the storage convention for SQLite columns)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_date(raw_value: str) -> date:
    """Parse a YYYY-MM-DD string. Raises ValueError on bad input."""
    return datetime.strptime(raw_value.strip(), DATE_FORMAT).date()


def parse_rfc3339(raw_value: str) -> datetime:
    """Parse an RFC 3339 timestamp into naive UTC. Raises ValueError on bad input."""
    value = raw_value.strip()
    if not value:
        raise ValueError("Empty timestamp")
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return to_naive_utc(dt)


def format_rfc3339(value: datetime) -> str:
    """Render a naive-UTC or aware datetime as an RFC 3339 UTC string."""
    dt = to_naive_utc(value)
    return dt.replace(microsecond=0).isoformat() + "Z"


def normalize_timestamp(raw_value) -> str:
    """
    Normalize a stored sort date into a UTC RFC 3339 string.

    Accepts datetimes directly. Strings are tried as ISO 8601 first, then
    each of TIMELINE_DATETIME_FORMATS. Unparseable strings are returned
    unchanged; this never raises.
    """
    if raw_value is None:
        return ""
    if isinstance(raw_value, datetime):
        return format_rfc3339(raw_value)
    if isinstance(raw_value, date):
        return format_rfc3339(datetime(raw_value.year, raw_value.month, raw_value.day))

    value = str(raw_value).strip()
    try:
        return format_rfc3339(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        pass

    for fmt in TIMELINE_DATETIME_FORMATS:
        try:
            return format_rfc3339(datetime.strptime(value, fmt))
        except ValueError:
            continue

    return str(raw_value)


def format_long_date(value: date) -> str:
    """Format like 'January 2, 2006'."""
    return f"{value.strftime('%B')} {value.day}, {value.year}"
