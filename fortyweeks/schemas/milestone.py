"""Pydantic schemas for computed and persisted milestones."""

from datetime import date, datetime

from pydantic import BaseModel


class MilestoneInfoRead(BaseModel):
    """Catalog entry with dates for the current pregnancy."""

    week: int
    title: str
    description: str
    type: str
    date: date
    is_past: bool
    is_current: bool


class MilestoneRead(BaseModel):
    id: int
    pregnancy_id: int
    milestone_type: str
    title: str
    scheduled_date: date | None = None
    completed_date: date | None = None
    is_completed: bool
    notes: str | None = None
    week_number: int | None = None
    created_at: datetime
    updated_at: datetime
    display_title: str = ""
    status_text: str = ""

    model_config = {"from_attributes": True}


class MilestoneEdit(BaseModel):
    is_completed: bool | None = None
    scheduled_date: date | None = None
    notes: str | None = None
    notify_village: bool = False
