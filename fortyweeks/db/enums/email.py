"""Email notification enums."""

from enum import Enum


class EmailType(str, Enum):
    UPDATE = "update"
    MILESTONE = "milestone"
    ANNOUNCEMENT = "announcement"
    WELCOME = "welcome"
    REMINDER = "reminder"
    ACCESS_REQUEST = "access_request"
    TEST = "test"


class DeliveryStatus(str, Enum):
    """Delivery status of an EmailNotification row."""

    PENDING = "pending"  # Queued in the outbox, not attempted yet
    SENT = "sent"
    DELIVERED = "delivered"
    BOUNCED = "bounced"
    FAILED = "failed"
    COMPLAINT = "complaint"


SUCCESSFUL_STATUSES = {DeliveryStatus.SENT.value, DeliveryStatus.DELIVERED.value}
FAILED_STATUSES = {
    DeliveryStatus.FAILED.value,
    DeliveryStatus.BOUNCED.value,
    DeliveryStatus.COMPLAINT.value,
}

EMAIL_TYPE_LABELS = {
    EmailType.UPDATE.value: "Pregnancy Update",
    EmailType.MILESTONE.value: "Milestone Notification",
    EmailType.ANNOUNCEMENT.value: "Announcement",
    EmailType.WELCOME.value: "Welcome Email",
    EmailType.REMINDER.value: "Reminder",
    EmailType.ACCESS_REQUEST.value: "Access Request",
    EmailType.TEST.value: "Test Email",
}

DELIVERY_STATUS_LABELS = {
    DeliveryStatus.PENDING.value: "Pending",
    DeliveryStatus.SENT.value: "Sent",
    DeliveryStatus.DELIVERED.value: "Delivered",
    DeliveryStatus.BOUNCED.value: "Bounced",
    DeliveryStatus.FAILED.value: "Failed",
    DeliveryStatus.COMPLAINT.value: "Complaint",
}
