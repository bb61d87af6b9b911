"""Admin email endpoints - test sends, delivery history, and SES configuration."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from fortyweeks.core.deps import get_db, require_admin
from fortyweeks.core.exceptions import status_code_for
from fortyweeks.core.structured_logging import mask_email
from fortyweeks.schemas.auth import UserSession
from fortyweeks.schemas.email import (
    EmailActionResponse,
    EmailNotificationRead,
    EmailNotificationsResponse,
    EmailStatisticsRead,
    EmailTestRequest,
    SendUpdateNotificationRequest,
)
from fortyweeks.services import email_service, pregnancy_service, update_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/email", tags=["email"])


def _admin_pregnancy(db: Session, session: UserSession):
    pregnancy = pregnancy_service.get_active_pregnancy(db, session.user_id)
    if not pregnancy:
        raise HTTPException(status_code=404, detail="No active pregnancy found")
    return pregnancy


@router.post("/test", response_model=EmailActionResponse)
def send_test_email(
    body: EmailTestRequest,
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Queue a test email; the worker delivers it."""
    if not body.to_email:
        raise HTTPException(status_code=400, detail="to_email is required")

    notification = email_service.queue_test_email(db, body.to_email, body.to_name)
    db.commit()
    logger.info(
        "Admin %s queued test email %s to %s",
        session.user_id,
        notification.id,
        mask_email(body.to_email),
    )
    return EmailActionResponse(success=True, message=f"Test email queued for {body.to_email}")


@router.get("/notifications", response_model=EmailNotificationsResponse)
def list_notifications(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    pregnancy = _admin_pregnancy(db, session)
    rows = email_service.list_notifications(db, pregnancy.id, limit, offset)
    return EmailNotificationsResponse(
        notifications=[EmailNotificationRead(**row) for row in rows],
        total=len(rows),
        limit=limit,
        offset=offset,
    )


@router.get("/statistics", response_model=EmailStatisticsRead)
def get_statistics(
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    pregnancy = _admin_pregnancy(db, session)
    return EmailStatisticsRead(**email_service.get_statistics(db, pregnancy.id).to_dict())


@router.get("/config", response_model=EmailActionResponse)
def check_config(session: UserSession = Depends(require_admin)):
    """Probe SES credentials and quota."""
    ok, message = email_service.check_configuration()
    if not ok:
        return JSONResponse(status_code=500, content={"success": False, "message": message})
    return EmailActionResponse(success=True, message=message)


@router.post("/send-update-notification", response_model=EmailActionResponse)
def send_update_notification(
    body: SendUpdateNotificationRequest,
    session: UserSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Re-queue village emails for one of the admin's own updates."""
    if not body.update_id:
        raise HTTPException(status_code=400, detail="update_id is required")

    try:
        update = update_service.get_owned_update(db, session.user_id, body.update_id)
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))

    queued = email_service.queue_update_notifications(db, update, update.pregnancy)
    db.commit()
    return EmailActionResponse(
        success=True,
        message=f"Update notification queued for {queued} village members",
    )
