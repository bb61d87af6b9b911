"""Pagination utilities for list endpoints."""

from dataclasses import dataclass

from fastapi import Query


# Pagination limits
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass
class OffsetParams:
    """Limit/offset pagination parameters from query string."""
    limit: int
    offset: int


def clamp_limit(raw_limit: int | None, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    """Accept limit only inside 1..maximum; anything else falls back to default."""
    if raw_limit is None or raw_limit < 1 or raw_limit > maximum:
        return default
    return raw_limit


def clamp_offset(raw_offset: int | None) -> int:
    """Accept offset only when >= 0."""
    if raw_offset is None or raw_offset < 0:
        return 0
    return raw_offset


def get_offset_pagination(
    limit: int | None = Query(None, description=f"Items per page (1-{MAX_LIMIT}, default {DEFAULT_LIMIT})"),
    offset: int | None = Query(None, description="Items to skip"),
) -> OffsetParams:
    """
    Lenient pagination dependency.

    Out-of-range values fall back to defaults instead of failing validation.

    Usage:
        @router.get("/items")
        def list_items(pagination: OffsetParams = Depends(get_offset_pagination)):
            ...
    """
    return OffsetParams(limit=clamp_limit(limit), offset=clamp_offset(offset))
