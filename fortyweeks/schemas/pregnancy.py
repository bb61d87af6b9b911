"""Pydantic schemas for pregnancies, invites, and cover photos."""

from datetime import date, datetime

from pydantic import BaseModel


class PregnancyCreate(BaseModel):
    """Request to start tracking a pregnancy. due_date is YYYY-MM-DD."""

    due_date: str = ""
    partner_name: str | None = None
    partner_email: str | None = None
    baby_name: str | None = None


class PregnancyEdit(BaseModel):
    """Partial edit; only fields present in the body are applied."""

    due_date: str | None = None
    conception_date: str | None = None
    partner_name: str | None = None
    partner_email: str | None = None
    baby_name: str | None = None


class PregnancyRead(BaseModel):
    id: int
    user_id: int
    partner_name: str | None = None
    partner_email: str | None = None
    due_date: date
    conception_date: date | None = None
    current_week: int
    baby_name: str | None = None
    is_active: bool
    share_id: str
    cover_photo_filename: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PregnancyResponse(PregnancyRead):
    """Pregnancy with the week recomputed at request time."""

    current_week_calculated: int


class InviteHashResponse(BaseModel):
    hash: str


class InviteInfoResponse(BaseModel):
    parent_names: str
    baby_name: str
    due_date: str


class CoverPhotoResponse(BaseModel):
    success: bool
    filename: str | None = None
