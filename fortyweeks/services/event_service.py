"""Event service - append-only pregnancy timeline events."""

from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.orm import Session

from fortyweeks.db.enums import EventType, VillagerJoinSource
from fortyweeks.db.models import PregnancyEvent

logger = logging.getLogger(__name__)


def record_event(
    db: Session,
    pregnancy_id: int,
    event_type: EventType,
    title: str,
    description: str | None = None,
    week_number: int | None = None,
    created_by: int | None = None,
    event_data: dict | None = None,
) -> PregnancyEvent:
    """
    Append a timeline event.

    Args:
        db: Database session
        pregnancy_id: Pregnancy the event belongs to
        event_type: Type of event (from EventType enum)
        title: Short headline shown in the timeline
        description: Optional longer text
        week_number: Gestational week at the time of the event
        created_by: Acting user (None for system/villager actions)
        event_data: Type-specific details as JSON

    Returns:
        The created event
    """
    event = PregnancyEvent(
        pregnancy_id=pregnancy_id,
        event_type=event_type.value,
        title=title,
        description=description,
        week_number=week_number,
        created_by=created_by,
        event_data=event_data,
    )
    db.add(event)
    db.flush()  # Don't commit - let caller control transaction
    return event


def emit_best_effort(db: Session, emit: Callable[[], PregnancyEvent]) -> PregnancyEvent | None:
    """
    Run an event emitter inside a SAVEPOINT.

    Any failure is logged and rolled back to the savepoint so the caller's
    primary write still commits.
    """
    try:
        with db.begin_nested():
            return emit()
    except Exception:
        logger.exception("Failed to record timeline event")
        return None


def list_events(
    db: Session,
    pregnancy_id: int,
    limit: int,
    offset: int,
) -> tuple[list[PregnancyEvent], int]:
    """Raw events for a pregnancy, newest first, with total count."""
    query = db.query(PregnancyEvent).filter(PregnancyEvent.pregnancy_id == pregnancy_id)
    total = query.count()
    events = (
        query.order_by(PregnancyEvent.created_at.desc(), PregnancyEvent.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return events, total


# =============================================================================
# Typed emitters
# =============================================================================

def log_pregnancy_announced(
    db: Session,
    pregnancy_id: int,
    user_id: int,
    week_number: int | None,
) -> PregnancyEvent:
    return record_event(
        db=db,
        pregnancy_id=pregnancy_id,
        event_type=EventType.PREGNANCY_ANNOUNCED,
        title="Pregnancy begins! 🎉",
        description="Your pregnancy tracking has been set up and your journey begins!",
        week_number=week_number,
        created_by=user_id,
    )


def log_villager_added(
    db: Session,
    pregnancy_id: int,
    villager_name: str,
    relationship: str,
    week_number: int | None,
) -> PregnancyEvent:
    """Villager added by the owner (single or bulk)."""
    return record_event(
        db=db,
        pregnancy_id=pregnancy_id,
        event_type=EventType.VILLAGER_JOINED,
        title=f"Added {villager_name} to your village",
        description=f"{villager_name} ({relationship}) has been added to your pregnancy village",
        week_number=week_number,
        event_data={
            "villager_name": villager_name,
            "relationship": relationship,
            "source": VillagerJoinSource.MANUAL.value,
        },
    )


def log_villager_joined(
    db: Session,
    pregnancy_id: int,
    villager_name: str,
    relationship: str,
    week_number: int | None,
) -> PregnancyEvent:
    """Villager joined through the invite link."""
    return record_event(
        db=db,
        pregnancy_id=pregnancy_id,
        event_type=EventType.VILLAGER_JOINED,
        title=f"{villager_name} joined your village",
        description=(
            f"{villager_name} ({relationship}) has joined your pregnancy village "
            "through your invite link"
        ),
        week_number=week_number,
        event_data={
            "villager_name": villager_name,
            "relationship": relationship,
            "source": VillagerJoinSource.INVITE.value,
        },
    )


def log_villager_told(
    db: Session,
    pregnancy_id: int,
    villager_name: str,
    user_id: int,
    week_number: int | None,
) -> PregnancyEvent:
    return record_event(
        db=db,
        pregnancy_id=pregnancy_id,
        event_type=EventType.VILLAGER_TOLD,
        title=f"Told {villager_name} about pregnancy",
        description=f"{villager_name} now knows about your pregnancy",
        week_number=week_number,
        created_by=user_id,
        event_data={"villager_name": villager_name},
    )


def log_milestone_reached(
    db: Session,
    pregnancy_id: int,
    milestone_title: str,
    week_number: int,
) -> PregnancyEvent:
    return record_event(
        db=db,
        pregnancy_id=pregnancy_id,
        event_type=EventType.MILESTONE_REACHED,
        title=f"Week {week_number} milestone: {milestone_title}",
        description=f"You've reached week {week_number} of your pregnancy!",
        week_number=week_number,
        event_data={"milestone_week": week_number},
    )


def log_update_shared(
    db: Session,
    pregnancy_id: int,
    user_id: int,
    user_name: str,
    update_title: str,
    update_content: str | None,
    week_number: int | None,
) -> PregnancyEvent:
    return record_event(
        db=db,
        pregnancy_id=pregnancy_id,
        event_type=EventType.UPDATE_POSTED,
        title=f"{user_name} shared an update",
        description=update_content or update_title,
        week_number=week_number,
        created_by=user_id,
        event_data={"update_title": update_title},
    )
