"""Structured logging helpers (PII-safe)."""

from typing import Any


def build_log_context(
    *,
    user_id: int | None = None,
    pregnancy_id: int | None = None,
    request_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """
    Logger `extra=` dict holding only the fields that are set.

    Ids and request metadata only; names and addresses stay out of it.
    """
    fields = {
        "user_id": user_id,
        "pregnancy_id": pregnancy_id,
        "request_id": request_id,
        "route": route,
        "method": method,
    }
    return {key: value for key, value in fields.items() if value}


def mask_email(email: str | None) -> str:
    """Mask an address for logs: 'jan...@example.com'."""
    if not email:
        return ""
    local, _, domain = email.partition("@")
    prefix = local[:3] if local else ""
    return f"{prefix}...@{domain}" if domain else f"{prefix}..."
