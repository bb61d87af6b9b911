"""Authentication router - registration, login, and account lookups."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from fortyweeks.core.deps import get_current_session, get_db, require_admin
from fortyweeks.core.exceptions import status_code_for
from fortyweeks.core.rate_limit import AUTH_LIMIT, limiter
from fortyweeks.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserRead,
    UserSession,
)
from fortyweeks.services import auth_service

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
@limiter.limit(AUTH_LIMIT)
def register(
    request: Request,
    body: RegisterRequest,
    db: Session = Depends(get_db),
):
    """Create an account and return a bearer token."""
    try:
        user = auth_service.register_user(db, body.name, body.email, body.password)
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))
    db.commit()
    return RegisterResponse(message="User created successfully", token=auth_service.issue_token(user))


@router.post("/login", response_model=LoginResponse)
@limiter.limit(AUTH_LIMIT)
def login(
    request: Request,
    body: LoginRequest,
    db: Session = Depends(get_db),
):
    try:
        user = auth_service.authenticate(db, body.email, body.password)
    except auth_service.InvalidCredentials as e:
        raise HTTPException(status_code=401, detail=str(e))
    return LoginResponse(token=auth_service.issue_token(user))


@router.get("/users", response_model=list[UserRead])
def list_users(
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """First registered users (admin only)."""
    return auth_service.list_users(db)


@router.get("/profile", response_model=UserRead)
def get_profile(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    user = auth_service.get_user(db, session.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
