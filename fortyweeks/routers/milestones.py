"""Milestones router - the standard catalog and the pregnancy's scheduled milestones."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fortyweeks.core.deps import get_active_pregnancy, get_db
from fortyweeks.core.exceptions import status_code_for
from fortyweeks.db.models import Milestone, Pregnancy
from fortyweeks.schemas.milestone import MilestoneEdit, MilestoneInfoRead, MilestoneRead
from fortyweeks.services import email_service, event_service, milestone_service

router = APIRouter(prefix="/api/milestones", tags=["milestones"])


def _to_read(milestone: Milestone) -> MilestoneRead:
    read = MilestoneRead.model_validate(milestone)
    read.display_title = milestone_service.display_title(milestone)
    read.status_text = milestone_service.status_text(milestone)
    return read


@router.get("", response_model=list[MilestoneInfoRead])
def get_milestones(pregnancy: Pregnancy = Depends(get_active_pregnancy)):
    """The 21 catalog milestones dated for this pregnancy."""
    current_week = milestone_service.pregnancy_current_week(pregnancy)
    milestones = milestone_service.generate_milestones(
        pregnancy.due_date, current_week, pregnancy.conception_date
    )
    return [MilestoneInfoRead(**m.to_dict()) for m in milestones]


@router.get("/scheduled", response_model=list[MilestoneRead])
def list_scheduled_milestones(
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    return [_to_read(m) for m in milestone_service.list_milestones(db, pregnancy.id)]


@router.put("/{milestone_id}", response_model=MilestoneRead)
def edit_milestone(
    milestone_id: int,
    body: MilestoneEdit,
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    """
    Edit a scheduled milestone.

    Completing it adds a milestone_reached event; with notify_village the
    subscribed village is emailed too.
    """
    try:
        milestone = milestone_service.get_milestone(db, pregnancy.id, milestone_id)
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))

    newly_completed = milestone_service.update_milestone(
        db,
        milestone,
        is_completed=body.is_completed,
        scheduled_date=body.scheduled_date,
        notes=body.notes,
    )

    if newly_completed:
        week = milestone.week_number or milestone_service.pregnancy_current_week(pregnancy)
        event_service.emit_best_effort(
            db,
            lambda: event_service.log_milestone_reached(db, pregnancy.id, milestone.title, week),
        )
        if body.notify_village:
            email_service.queue_best_effort(
                db,
                lambda: email_service.queue_milestone_notifications(db, milestone, pregnancy),
                f"milestone notifications for milestone {milestone.id}",
            )

    db.commit()
    db.refresh(milestone)
    return _to_read(milestone)
