"""FastAPI dependencies for authentication, authorization, and database access."""

from typing import Generator

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from fortyweeks.core.security import decode_access_token
from fortyweeks.db.session import SessionLocal
from fortyweeks.schemas.auth import UserSession


AUTH_HEADER = "Authorization"
BEARER_PREFIX = "Bearer "


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _extract_bearer_token(request: Request) -> str:
    header = request.headers.get(AUTH_HEADER)
    if not header:
        raise HTTPException(status_code=401, detail="Authorization header missing")
    if not header.startswith(BEARER_PREFIX) or not header[len(BEARER_PREFIX):].strip():
        raise HTTPException(status_code=401, detail="Invalid authorization header format")
    return header[len(BEARER_PREFIX):].strip()


def get_current_session(
    request: Request,
    db: Session = Depends(get_db),
) -> UserSession:
    """
    Resolve the authenticated principal from the bearer token.

    This is the PRIMARY auth dependency for most endpoints.

    Raises:
        HTTPException 401: Missing/malformed header, bad token, or unknown user
    """
    # Import here to avoid circular imports
    from fortyweeks.db.models import User

    token = _extract_bearer_token(request)

    try:
        payload = decode_access_token(token)
        user_id = int(payload["user_id"])
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token")

    return UserSession(
        user_id=user.id,
        name=user.name,
        email=user.email,
        is_admin=user.is_admin,
    )


def require_admin(
    session: UserSession = Depends(get_current_session),
) -> UserSession:
    """Restrict an endpoint to admin users."""
    if not session.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return session


def get_active_pregnancy(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    The caller's active pregnancy.

    Raises:
        HTTPException 404: The user has no active pregnancy
    """
    from fortyweeks.services import pregnancy_service

    pregnancy = pregnancy_service.get_active_pregnancy(db, session.user_id)
    if not pregnancy:
        raise HTTPException(status_code=404, detail="No active pregnancy found")
    return pregnancy
