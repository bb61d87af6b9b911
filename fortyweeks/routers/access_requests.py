"""Access requests router - the owner's review queue."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fortyweeks.core.deps import get_current_session, get_db
from fortyweeks.core.exceptions import status_code_for
from fortyweeks.db.enums import AccessRequestAction
from fortyweeks.schemas.auth import UserSession
from fortyweeks.schemas.village import AccessRequestRead, AccessRequestResolution
from fortyweeks.services import access_service, pregnancy_service

router = APIRouter(prefix="/api/village-members/access-requests", tags=["access-requests"])


@router.get("", response_model=list[AccessRequestRead])
def list_access_requests(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Pending requests, newest first. Empty when the user has no pregnancy."""
    pregnancy = pregnancy_service.get_active_pregnancy(db, session.user_id)
    if not pregnancy:
        return []
    return access_service.list_pending(db, pregnancy.id)


@router.post("/{request_id}/{action}", response_model=AccessRequestResolution)
def resolve_access_request(
    request_id: int,
    action: AccessRequestAction,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Approve (adds a told member and sends a welcome email) or deny."""
    try:
        result = access_service.resolve_request(db, session.user_id, request_id, action)
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))
    db.commit()
    return result
