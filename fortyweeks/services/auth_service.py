"""Auth service - registration, login, and user lookups."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fortyweeks.core.exceptions import ConflictError
from fortyweeks.core.security import create_access_token, hash_password, verify_password
from fortyweeks.core.structured_logging import mask_email
from fortyweeks.db.models import User
from fortyweeks.utils.normalization import normalize_email, normalize_text

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes.
MAX_PASSWORD_BYTES = 72
USER_LIST_LIMIT = 10


class InvalidCredentials(ValueError):
    """Login failed (unknown email or wrong password)."""


def get_user_by_email(db: Session, email: str) -> User | None:
    normalized = normalize_email(email)
    if not normalized:
        return None
    return db.query(User).filter(User.email == normalized).first()


def get_user(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def issue_token(user: User) -> str:
    return create_access_token(user.id, user.name, user.is_admin)


def register_user(db: Session, name: str, email: str, password: str) -> User:
    """
    Create an account.

    Raises:
        ValueError: Missing fields or overlong password
        ConflictError: Email already registered
    """
    name = normalize_text(name)
    normalized_email = normalize_email(email)
    if not name or not normalized_email or not password:
        raise ValueError("Name, email, and password are required")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError("Password must be at most 72 bytes")

    if get_user_by_email(db, normalized_email):
        raise ConflictError("Email already exists")

    user = User(
        name=name,
        email=normalized_email,
        password_hash=hash_password(password),
        is_admin=False,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already exists")

    logger.info("Registered user %s (%s)", user.id, mask_email(normalized_email))
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """
    Check credentials.

    Raises:
        InvalidCredentials: Unknown email or wrong password
    """
    user = get_user_by_email(db, email)
    if not user or not password or not verify_password(password, user.password_hash):
        raise InvalidCredentials("Invalid credentials")
    return user


def list_users(db: Session, limit: int = USER_LIST_LIMIT) -> list[User]:
    return db.query(User).order_by(User.id.asc()).limit(limit).all()


def set_admin(db: Session, user: User, is_admin: bool = True) -> User:
    user.is_admin = is_admin
    db.flush()
    return user
