"""Pregnancy router - the owner's pregnancy record, invite hash, and cover photo."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from sqlalchemy.orm import Session

from fortyweeks.core.config import settings
from fortyweeks.core.deps import get_active_pregnancy, get_current_session, get_db
from fortyweeks.core.exceptions import status_code_for
from fortyweeks.db.models import Pregnancy
from fortyweeks.schemas.auth import UserSession
from fortyweeks.schemas.pregnancy import (
    CoverPhotoResponse,
    InviteHashResponse,
    PregnancyCreate,
    PregnancyEdit,
    PregnancyRead,
    PregnancyResponse,
)
from fortyweeks.services import invite_service, pregnancy_service
from fortyweeks.services.media_service import IncomingFile
from fortyweeks.utils.datetime_parsing import parse_date
from fortyweeks.utils.file_upload import content_length_exceeds_limit, get_upload_file_size

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pregnancy", tags=["pregnancy"])


def _to_response(db: Session, pregnancy: Pregnancy) -> PregnancyResponse:
    week = pregnancy_service.refresh_current_week(db, pregnancy)
    data = PregnancyRead.model_validate(pregnancy).model_dump()
    return PregnancyResponse(**data, current_week_calculated=week)


def _parse_optional_date(raw_value: str | None, label: str):
    if raw_value is None or not raw_value.strip():
        return None
    try:
        return parse_date(raw_value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label} format")


@router.get("", response_model=PregnancyResponse)
@router.get("/current", response_model=PregnancyResponse)
def get_pregnancy(
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    """Active pregnancy with the week recomputed for today."""
    response = _to_response(db, pregnancy)
    db.commit()
    return response


@router.post("", response_model=PregnancyResponse, status_code=201)
def create_pregnancy(
    body: PregnancyCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    due_date = _parse_optional_date(body.due_date, "due date")
    if due_date is None:
        raise HTTPException(status_code=400, detail="Invalid due date format")

    try:
        pregnancy = pregnancy_service.create_pregnancy(
            db,
            user_id=session.user_id,
            due_date=due_date,
            partner_name=body.partner_name,
            partner_email=body.partner_email,
            baby_name=body.baby_name,
        )
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))

    response = _to_response(db, pregnancy)
    db.commit()
    logger.info("Created pregnancy %s for user %s", pregnancy.id, session.user_id)
    return response


@router.put("", response_model=PregnancyResponse)
def edit_pregnancy(
    body: PregnancyEdit,
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    """Partial edit. An empty conception_date clears it."""
    changes = body.model_dump(exclude_unset=True)
    if "due_date" in changes:
        changes["due_date"] = _parse_optional_date(changes["due_date"], "due date")
    if "conception_date" in changes:
        changes["conception_date"] = _parse_optional_date(changes["conception_date"], "conception date")

    pregnancy_service.update_pregnancy(db, pregnancy, changes)
    response = _to_response(db, pregnancy)
    db.commit()
    return response


@router.get("/invite-hash", response_model=InviteHashResponse)
def get_invite_hash(pregnancy: Pregnancy = Depends(get_active_pregnancy)):
    return InviteHashResponse(hash=invite_service.encode_invite_hash(pregnancy.id))


# =============================================================================
# Cover photo
# =============================================================================

@router.post("/cover-photo", response_model=CoverPhotoResponse)
def upload_cover_photo(
    request: Request,
    cover_photo: UploadFile | None = File(None),
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    """Replace the cover photo (.jpg/.jpeg/.png/.webp, 10 MB)."""
    max_bytes = settings.MAX_COVER_PHOTO_BYTES
    max_mb = max_bytes / (1024 * 1024)
    if content_length_exceeds_limit(request.headers.get("content-length"), max_size_bytes=max_bytes):
        raise HTTPException(status_code=400, detail=f"File size exceeds {max_mb:.0f} MB limit")
    if cover_photo is None or not cover_photo.filename:
        raise HTTPException(status_code=400, detail="No file provided")
    if get_upload_file_size(cover_photo) > max_bytes:
        raise HTTPException(status_code=400, detail=f"File size exceeds {max_mb:.0f} MB limit")

    try:
        filename = pregnancy_service.set_cover_photo(
            db, pregnancy, IncomingFile(cover_photo.filename, cover_photo.file)
        )
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))
    db.commit()
    return CoverPhotoResponse(success=True, filename=filename)


@router.delete("/cover-photo", response_model=CoverPhotoResponse)
def delete_cover_photo(
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    pregnancy_service.remove_cover_photo(db, pregnancy)
    db.commit()
    return CoverPhotoResponse(success=True)
