"""Timeline event enums."""

from enum import Enum


class EventType(str, Enum):
    """Types of pregnancy timeline events."""

    PREGNANCY_ANNOUNCED = "pregnancy_announced"  # Pregnancy first created
    VILLAGER_JOINED = "villager_joined"  # Manual add or invite-link join
    VILLAGER_TOLD = "villager_told"  # Member flipped to "knows"
    MILESTONE_REACHED = "milestone_reached"
    APPOINTMENT_COMPLETED = "appointment_completed"
    UPDATE_POSTED = "update_posted"  # Mirrors a shared update; hidden from the feed
    WEEK_PROGRESSION = "week_progression"


class VillagerJoinSource(str, Enum):
    """Stored in event_data.source for VILLAGER_JOINED events."""

    MANUAL = "manual"
    INVITE = "invite"
