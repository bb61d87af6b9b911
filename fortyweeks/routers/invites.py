"""Public invite endpoints - join page info and joining a village."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from fortyweeks.core.deps import get_db
from fortyweeks.core.exceptions import status_code_for
from fortyweeks.core.rate_limit import PUBLIC_LIMIT, limiter
from fortyweeks.schemas.pregnancy import InviteInfoResponse
from fortyweeks.schemas.village import (
    JoinVillageResponse,
    VillageMemberRead,
    VillageMembersBulkCreate,
)
from fortyweeks.services import invite_service

router = APIRouter(prefix="/api/pregnancy", tags=["invites"])


@router.get("/invite/{invite_hash}", response_model=InviteInfoResponse)
@limiter.limit(PUBLIC_LIMIT)
def get_invite_info(
    request: Request,
    invite_hash: str,
    db: Session = Depends(get_db),
):
    try:
        pregnancy = invite_service.resolve_invite_pregnancy(db, invite_hash)
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))
    return invite_service.invite_info(pregnancy)


@router.post("/join/{invite_hash}", response_model=JoinVillageResponse)
@limiter.limit(PUBLIC_LIMIT)
def join_village(
    request: Request,
    invite_hash: str,
    body: VillageMembersBulkCreate,
    db: Session = Depends(get_db),
):
    """Add the visitor to the village behind an invite link (one row per email)."""
    try:
        members = invite_service.join_via_invite(
            db,
            invite_hash,
            name=body.name,
            emails=body.emails,
            relationship=body.relationship,
            is_told=body.is_told,
        )
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))
    db.commit()
    return JoinVillageResponse(
        success=True,
        members=[VillageMemberRead.model_validate(m) for m in members],
    )
