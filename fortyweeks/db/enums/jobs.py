"""Outbox job enums."""

from enum import Enum


class JobType(str, Enum):
    SEND_EMAIL = "send_email"  # payload: {"email_notification_id": int}


class JobStatus(str, Enum):
    """
    Worker lifecycle of a job row.

    pending -> running -> completed, or back to pending after a failed attempt
    until max_attempts is used up, then failed.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
