"""Pydantic schemas for the owner and public timelines."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class TimelinePhoto(BaseModel):
    id: int
    update_id: int
    filename: str
    original_filename: str
    file_size: int
    caption: str | None = None
    sort_order: int
    created_at: str
    url: str
    is_video: bool


class TimelineItem(BaseModel):
    id: int
    type: str
    title: str
    description: str | None = None
    week_number: int | None = None
    created_at: str
    event_type: str | None = None
    update_type: str | None = None
    photos: list[TimelinePhoto] = []
    is_shared: bool | None = None
    pregnancy_id: int
    created_by: str | None = None


class TimelineResponse(BaseModel):
    events: list[TimelineItem]
    total: int


class EventRead(BaseModel):
    id: int
    pregnancy_id: int
    event_type: str
    title: str
    description: str | None = None
    event_data: dict[str, Any] | None = None
    week_number: int | None = None
    created_by: int | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class EventsResponse(BaseModel):
    events: list[EventRead]
    total: int


class PublicTimelineItem(BaseModel):
    id: int
    title: str
    description: str | None = None
    week_number: int | None = None
    update_date: str
    created_by: str
    photos: list[TimelinePhoto] = []
    pregnancy_id: int


class PublicPregnancySummary(BaseModel):
    parent_names: str
    baby_name: str
    due_date: str
    current_week: int


class PublicTimelineResponse(BaseModel):
    updates: list[PublicTimelineItem]
    total: int
    pregnancy: PublicPregnancySummary
