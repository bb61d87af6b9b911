"""Rate limiting configuration for the API."""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from fortyweeks.core.config import settings

# Single-process SQLite deployment: in-memory storage is sufficient.
IS_TESTING = os.getenv("TESTING", "").lower() in ("1", "true", "yes")
DEFAULT_LIMITS = (
    []
    if IS_TESTING or settings.RATE_LIMIT_API <= 0
    else [f"{settings.RATE_LIMIT_API}/minute"]
)

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    default_limits=DEFAULT_LIMITS,
    enabled=not IS_TESTING,
)

AUTH_LIMIT = f"{max(settings.RATE_LIMIT_AUTH, 1)}/minute"
PUBLIC_LIMIT = f"{max(settings.RATE_LIMIT_PUBLIC, 1)}/minute"
