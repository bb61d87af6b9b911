"""Public timeline endpoints - viewing by share link and requesting access."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from fortyweeks.core.deps import get_db
from fortyweeks.core.exceptions import status_code_for
from fortyweeks.core.rate_limit import PUBLIC_LIMIT, limiter
from fortyweeks.core.structured_logging import mask_email
from fortyweeks.db.models import Pregnancy
from fortyweeks.schemas.timeline import PublicTimelineResponse
from fortyweeks.schemas.village import (
    AccessRequestCreate,
    AccessRequestCreated,
    AccessRequestRead,
    VerifyAccessRequest,
    VerifyAccessResponse,
)
from fortyweeks.services import access_service, pregnancy_service, timeline_service
from fortyweeks.utils.pagination import OffsetParams, get_offset_pagination

logger = logging.getLogger(__name__)

router = APIRouter(tags=["public-timeline"])


def _pregnancy_for_share_id(db: Session, share_id: str) -> Pregnancy:
    pregnancy = pregnancy_service.get_pregnancy_by_share_id(db, share_id)
    if not pregnancy:
        raise HTTPException(status_code=404, detail="Pregnancy not found")
    return pregnancy


@router.get("/timeline/{share_id}", response_model=PublicTimelineResponse)
@limiter.limit(PUBLIC_LIMIT)
def get_public_timeline(
    request: Request,
    share_id: str,
    email: str | None = Query(None),
    pagination: OffsetParams = Depends(get_offset_pagination),
    db: Session = Depends(get_db),
):
    """Shared updates only, for an email the owner has let in."""
    if not email or not email.strip():
        raise HTTPException(status_code=400, detail="Email parameter required")

    pregnancy = _pregnancy_for_share_id(db, share_id)
    if not access_service.has_access(db, pregnancy, email):
        logger.info("Timeline access denied for %s", mask_email(email))
        raise HTTPException(status_code=403, detail="Access denied")

    items, total = timeline_service.get_public_timeline(
        db, pregnancy, pagination.limit, pagination.offset
    )
    return PublicTimelineResponse(
        updates=items,
        total=total,
        pregnancy=timeline_service.public_pregnancy_summary(pregnancy),
    )


@router.post("/api/timeline/{share_id}/verify-access", response_model=VerifyAccessResponse)
@limiter.limit(PUBLIC_LIMIT)
def verify_access(
    request: Request,
    share_id: str,
    body: VerifyAccessRequest,
    db: Session = Depends(get_db),
):
    if not body.email.strip():
        raise HTTPException(status_code=400, detail="Email is required")
    pregnancy = _pregnancy_for_share_id(db, share_id)
    return VerifyAccessResponse(has_access=access_service.has_access(db, pregnancy, body.email))


@router.post(
    "/api/timeline/{share_id}/request-access",
    response_model=AccessRequestCreated,
    status_code=201,
)
@limiter.limit(PUBLIC_LIMIT)
def request_access(
    request: Request,
    share_id: str,
    body: AccessRequestCreate,
    db: Session = Depends(get_db),
):
    """Ask the owner for access; the owner gets an email."""
    pregnancy = _pregnancy_for_share_id(db, share_id)
    try:
        access_request = access_service.request_access(
            db,
            pregnancy,
            email=body.email,
            name=body.name,
            relationship=body.relationship,
            message=body.message,
        )
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))
    db.commit()
    return AccessRequestCreated(
        message="Access request submitted",
        request=AccessRequestRead.model_validate(access_request),
    )
