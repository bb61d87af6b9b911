"""Security utilities for bearer JWTs and password hashing."""

from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from fortyweeks.core.config import settings


JWT_ALGORITHM = "HS256"


# =============================================================================
# Bearer Token (JWT in Authorization header)
# =============================================================================

def create_access_token(user_id: int, name: str, is_admin: bool) -> str:
    """
    Create signed bearer JWT.

    Claims carry the user identity and admin flag; tokens expire after
    JWT_EXPIRES_HOURS (24h by default).
    """
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "name": name,
        "is_admin": is_admin,
        "iat": now,
        "exp": now + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify bearer JWT.

    Raises:
        jwt.InvalidTokenError: If the token is malformed, tampered or expired
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[JWT_ALGORITHM],
        options={"require": ["exp", "iat"]},
    )


# =============================================================================
# Passwords
# =============================================================================

def hash_password(password: str) -> str:
    """Hash a password with bcrypt (default cost)."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time bcrypt check; malformed hashes count as a mismatch."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
