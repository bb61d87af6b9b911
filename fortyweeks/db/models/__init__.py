"""SQLAlchemy ORM models."""

from fortyweeks.db.models.auth import User
from fortyweeks.db.models.email import EmailNotification
from fortyweeks.db.models.events import PregnancyEvent
from fortyweeks.db.models.jobs import Job
from fortyweeks.db.models.pregnancy import Milestone, Pregnancy
from fortyweeks.db.models.updates import PregnancyUpdate, UpdatePhoto
from fortyweeks.db.models.village import AccessRequest, VillageMember

__all__ = [
    "AccessRequest",
    "EmailNotification",
    "Job",
    "Milestone",
    "Pregnancy",
    "PregnancyEvent",
    "PregnancyUpdate",
    "UpdatePhoto",
    "User",
    "VillageMember",
]
