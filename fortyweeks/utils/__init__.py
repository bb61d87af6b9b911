"""Utility modules."""

from fortyweeks.utils.datetime_parsing import (
    format_long_date,
    format_rfc3339,
    normalize_timestamp,
    parse_date,
    parse_rfc3339,
    utc_now,
)
from fortyweeks.utils.normalization import normalize_email, normalize_text
from fortyweeks.utils.pagination import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    OffsetParams,
    clamp_limit,
    clamp_offset,
    get_offset_pagination,
)

__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "OffsetParams",
    "clamp_limit",
    "clamp_offset",
    "format_long_date",
    "format_rfc3339",
    "get_offset_pagination",
    "normalize_email",
    "normalize_text",
    "normalize_timestamp",
    "parse_date",
    "parse_rfc3339",
    "utc_now",
]
