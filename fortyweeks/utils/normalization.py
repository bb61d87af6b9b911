"""Input normalization utilities."""

from typing import Optional


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    Normalize email to lowercase.

    Args:
        email: Raw email input

    Returns:
        Lowercased email or None if empty
    """
    if not email:
        return None
    cleaned = email.strip().lower()
    return cleaned or None


def normalize_text(value: Optional[str]) -> str:
    """Strip surrounding whitespace; None becomes an empty string."""
    if value is None:
        return ""
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    """Strip whitespace and collapse empty strings to None."""
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def first_name(full_name: Optional[str]) -> str:
    if not full_name:
        return ""
    parts = full_name.split()
    return parts[0] if parts else ""
