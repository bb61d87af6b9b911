"""Updates router - the owner's posts with photos and videos."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from fortyweeks.core.config import settings
from fortyweeks.core.deps import get_active_pregnancy, get_current_session, get_db
from fortyweeks.core.exceptions import status_code_for
from fortyweeks.db.models import Pregnancy
from fortyweeks.schemas.auth import UserSession
from fortyweeks.schemas.update import (
    ShareToggleRequest,
    ShareToggleResponse,
    UpdateData,
    UpdateRead,
)
from fortyweeks.services import update_service
from fortyweeks.services.media_service import IncomingFile
from fortyweeks.services.update_service import UpdateInput
from fortyweeks.utils.file_upload import content_length_exceeds_limit

router = APIRouter(prefix="/api/updates", tags=["updates"])

MULTIPART = "multipart/form-data"


def _incoming(files: list) -> list[IncomingFile]:
    return [
        IncomingFile(f.filename, f.file)
        for f in files
        if isinstance(f, UploadFile) and f.filename
    ]


async def _read_update_body(request: Request) -> UpdateInput:
    """
    Parse an update body.

    Multipart bodies carry the fields as JSON in `data` plus `photos` and
    `videos` files. Plain JSON bodies carry the fields only.
    """
    max_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
    if content_length_exceeds_limit(
        request.headers.get("content-length"),
        max_size_bytes=settings.MAX_UPLOAD_BYTES,
    ):
        raise HTTPException(status_code=400, detail=f"File size exceeds {max_mb:.0f} MB limit")

    photos: list[IncomingFile] = []
    videos: list[IncomingFile] = []
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith(MULTIPART):
            form = await request.form()
            raw_data = form.get("data") or "{}"
            data = UpdateData.model_validate_json(raw_data if isinstance(raw_data, str) else "{}")
            photos = _incoming(form.getlist("photos"))
            videos = _incoming(form.getlist("videos"))
        else:
            raw_body = await request.body()
            data = UpdateData.model_validate_json(raw_body or b"{}")
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid request data")

    return UpdateInput(
        title=data.title,
        content=data.content,
        update_type=data.update_type,
        appointment_type=data.appointment_type,
        is_shared=data.is_shared,
        date=data.date,
        photos=photos,
        videos=videos,
    )


@router.get("", response_model=list[UpdateRead])
def list_updates(
    view: str | None = Query(None, description="'villager' shows shared updates only"),
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    """Updates newest first; ?view=villager previews what villagers see."""
    return update_service.list_updates(db, pregnancy.id, shared_only=view == "villager")


@router.post("", response_model=UpdateRead, status_code=201)
async def create_update(
    request: Request,
    session: UserSession = Depends(get_current_session),
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    """Create an update; shared updates notify the village."""
    data = await _read_update_body(request)

    def _create():
        try:
            update = update_service.create_update(db, pregnancy, session, data)
        except ValueError as e:
            raise HTTPException(status_code=status_code_for(e), detail=str(e))
        db.commit()
        db.refresh(update)
        return UpdateRead.model_validate(update)

    return await run_in_threadpool(_create)


@router.put("/{update_id}", response_model=UpdateRead)
async def edit_update(
    update_id: int,
    request: Request,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Replace an update's fields (JSON or multipart); new media is appended."""
    data = await _read_update_body(request)

    def _edit():
        try:
            update = update_service.get_owned_update(db, session.user_id, update_id)
            update = update_service.edit_update(db, update, session, data)
        except ValueError as e:
            raise HTTPException(status_code=status_code_for(e), detail=str(e))
        db.commit()
        db.refresh(update)
        return UpdateRead.model_validate(update)

    return await run_in_threadpool(_edit)


@router.put("/{update_id}/share", response_model=ShareToggleResponse)
def toggle_share(
    update_id: int,
    body: ShareToggleRequest,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        update = update_service.get_owned_update(db, session.user_id, update_id)
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))

    update_service.set_shared(db, update, session, body.is_shared)
    db.commit()
    return ShareToggleResponse(success=True, is_shared=body.is_shared)
