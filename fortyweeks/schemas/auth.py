"""Authentication-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel


class TokenPayload(BaseModel):
    """Decoded JWT payload structure."""
    user_id: int
    name: str
    is_admin: bool = False


class UserSession(BaseModel):
    """
    Authenticated principal for a request.

    Returned by the get_current_session dependency and passed explicitly
    to route handlers and services.
    """
    user_id: int
    name: str
    email: str
    is_admin: bool = False


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class RegisterRequest(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    token: str


class RegisterResponse(BaseModel):
    message: str
    token: str


class UserRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    email: str
    is_admin: bool
    created_at: datetime
