"""Enum definitions for application constants."""

from fortyweeks.db.enums.email import (
    DELIVERY_STATUS_LABELS,
    EMAIL_TYPE_LABELS,
    FAILED_STATUSES,
    SUCCESSFUL_STATUSES,
    DeliveryStatus,
    EmailType,
)
from fortyweeks.db.enums.events import EventType, VillagerJoinSource
from fortyweeks.db.enums.jobs import JobStatus, JobType
from fortyweeks.db.enums.pregnancy import (
    APPOINTMENT_TYPE_LABELS,
    MILESTONE_TYPE_LABELS,
    UPDATE_TYPE_LABELS,
    AppointmentType,
    MilestoneCategory,
    MilestoneType,
    UpdateType,
)
from fortyweeks.db.enums.village import (
    DEFAULT_RELATIONSHIP_LABEL,
    RELATIONSHIP_LABELS,
    AccessRequestAction,
    AccessRequestStatus,
    Relationship,
)

__all__ = [
    "APPOINTMENT_TYPE_LABELS",
    "AccessRequestAction",
    "AccessRequestStatus",
    "AppointmentType",
    "DEFAULT_RELATIONSHIP_LABEL",
    "DELIVERY_STATUS_LABELS",
    "DeliveryStatus",
    "EMAIL_TYPE_LABELS",
    "EmailType",
    "EventType",
    "FAILED_STATUSES",
    "JobStatus",
    "JobType",
    "MILESTONE_TYPE_LABELS",
    "MilestoneCategory",
    "MilestoneType",
    "RELATIONSHIP_LABELS",
    "Relationship",
    "SUCCESSFUL_STATUSES",
    "UPDATE_TYPE_LABELS",
    "UpdateType",
    "VillagerJoinSource",
]
