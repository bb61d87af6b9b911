"""Pydantic schemas for updates and their media."""

from datetime import datetime

from pydantic import BaseModel


class UpdateData(BaseModel):
    """
    Update fields, sent as JSON or as the `data` part of a multipart body.

    date is RFC 3339; when omitted the update is dated now.
    """

    title: str = ""
    content: str | None = None
    update_type: str | None = None
    appointment_type: str | None = None
    is_shared: bool = False
    date: str | None = None


class UpdatePhotoRead(BaseModel):
    id: int
    update_id: int
    filename: str
    original_filename: str
    file_size: int
    caption: str | None = None
    sort_order: int
    created_at: datetime

    model_config = {"from_attributes": True}


class UpdateRead(BaseModel):
    id: int
    pregnancy_id: int
    week_number: int | None = None
    title: str
    content: str | None = None
    update_type: str
    appointment_type: str | None = None
    is_shared: bool
    shared_at: datetime | None = None
    update_date: datetime | None = None
    created_at: datetime
    updated_at: datetime
    photos: list[UpdatePhotoRead] = []

    model_config = {"from_attributes": True}


class ShareToggleRequest(BaseModel):
    is_shared: bool


class ShareToggleResponse(BaseModel):
    success: bool
    is_shared: bool
