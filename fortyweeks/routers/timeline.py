"""Timeline router - the owner's combined feed and raw events."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fortyweeks.core.deps import get_active_pregnancy, get_db
from fortyweeks.db.models import Pregnancy
from fortyweeks.schemas.timeline import EventRead, EventsResponse, TimelineResponse
from fortyweeks.services import event_service, timeline_service
from fortyweeks.utils.pagination import OffsetParams, get_offset_pagination

router = APIRouter(prefix="/api", tags=["timeline"])


@router.get("/timeline", response_model=TimelineResponse)
def get_timeline(
    pagination: OffsetParams = Depends(get_offset_pagination),
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    """Events and updates merged, newest first."""
    items = timeline_service.get_combined_timeline(
        db, pregnancy.id, pagination.limit, pagination.offset
    )
    return TimelineResponse(events=items, total=timeline_service.count_combined(db, pregnancy.id))


@router.get("/events", response_model=EventsResponse)
def list_events(
    pagination: OffsetParams = Depends(get_offset_pagination),
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    events, total = event_service.list_events(db, pregnancy.id, pagination.limit, pagination.offset)
    return EventsResponse(events=[EventRead.model_validate(e) for e in events], total=total)
