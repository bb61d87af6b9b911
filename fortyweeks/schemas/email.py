"""Pydantic schemas for email admin endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr


class EmailTestRequest(BaseModel):
    to_email: EmailStr | None = None
    to_name: str | None = None


class SendUpdateNotificationRequest(BaseModel):
    update_id: int | None = None


class EmailActionResponse(BaseModel):
    success: bool
    message: str


class EmailNotificationRead(BaseModel):
    id: int
    email_type: str
    display_type: str
    subject: str
    recipient_name: str
    recipient_email: str
    sent_at: datetime | None = None
    delivery_status: str
    display_status: str
    is_successful: bool
    is_failed: bool
    ses_message_id: str | None = None
    created_at: datetime


class EmailNotificationsResponse(BaseModel):
    notifications: list[EmailNotificationRead]
    total: int
    limit: int
    offset: int


class EmailStatisticsRead(BaseModel):
    total_sent: int
    total_delivered: int
    total_failed: int
    total_bounced: int
    delivery_rate: float
