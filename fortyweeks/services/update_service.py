"""Update service - user-authored posts with photos and videos."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from fortyweeks.core.exceptions import NotFoundError
from fortyweeks.db.enums import UpdateType
from fortyweeks.db.models import Pregnancy, PregnancyUpdate, UpdatePhoto
from fortyweeks.schemas.auth import UserSession
from fortyweeks.services import email_service, event_service, media_service, milestone_service
from fortyweeks.services.media_service import IncomingFile, StoredFile
from fortyweeks.utils.datetime_parsing import parse_rfc3339, utc_now
from fortyweeks.utils.normalization import normalize_text, optional_text

logger = logging.getLogger(__name__)


@dataclass
class UpdateInput:
    """Fields accepted when creating or editing an update."""

    title: str = ""
    content: str | None = None
    update_type: str | None = None
    appointment_type: str | None = None
    is_shared: bool = False
    date: str | None = None
    photos: list[IncomingFile] = field(default_factory=list)
    videos: list[IncomingFile] = field(default_factory=list)


def _validated(data: UpdateInput) -> tuple[str, str, object]:
    """Return (title, update_type, update_date) or raise ValueError."""
    title = normalize_text(data.title)
    if not title:
        raise ValueError("Title is required")

    update_type = normalize_text(data.update_type) or UpdateType.GENERAL.value
    if not UpdateType.has_value(update_type):
        raise ValueError("Invalid update type")

    if data.date and data.date.strip():
        try:
            update_date = parse_rfc3339(data.date)
        except ValueError:
            raise ValueError("Invalid date format")
    else:
        update_date = utc_now()
    return title, update_type, update_date


def _attach_media(
    db: Session,
    update: PregnancyUpdate,
    photos: list[IncomingFile],
    videos: list[IncomingFile],
    start_order: int,
) -> int:
    """Store files and add UpdatePhoto rows; videos sort after photos. Returns rows added."""
    stored_photos = media_service.save_update_photos(update.pregnancy_id, update.id, photos)
    stored_videos = media_service.save_update_videos(update.pregnancy_id, update.id, videos)

    rows = []
    for i, stored in enumerate(stored_photos):
        rows.append(_photo_row(update.id, stored, start_order + i))
    video_start = start_order + len(photos)
    for i, stored in enumerate(stored_videos):
        rows.append(_photo_row(update.id, stored, video_start + i))
    db.add_all(rows)
    db.flush()
    return len(rows)


def _photo_row(update_id: int, stored: StoredFile, sort_order: int) -> UpdatePhoto:
    return UpdatePhoto(
        update_id=update_id,
        filename=stored.filename,
        original_filename=stored.original_filename,
        file_size=stored.file_size,
        sort_order=sort_order,
    )


def _next_sort_order(db: Session, update_id: int) -> int:
    current = (
        db.query(func.max(UpdatePhoto.sort_order))
        .filter(UpdatePhoto.update_id == update_id)
        .scalar()
    )
    return 0 if current is None else current + 1


def _on_shared(
    db: Session,
    update: PregnancyUpdate,
    pregnancy: Pregnancy,
    session: UserSession,
) -> None:
    """Side effects of an update becoming shared: timeline event and village emails."""
    event_service.emit_best_effort(
        db,
        lambda: event_service.log_update_shared(
            db,
            pregnancy.id,
            session.user_id,
            session.name,
            update.title,
            update.content,
            update.week_number,
        ),
    )
    email_service.queue_best_effort(
        db,
        lambda: email_service.queue_update_notifications(db, update, pregnancy),
        f"update notifications for update {update.id}",
    )


def create_update(
    db: Session,
    pregnancy: Pregnancy,
    session: UserSession,
    data: UpdateInput,
) -> PregnancyUpdate:
    """
    Create an update with optional photos and videos.

    Raises:
        ValueError: Missing title, bad type, or unparseable date
    """
    title, update_type, update_date = _validated(data)

    update = PregnancyUpdate(
        pregnancy_id=pregnancy.id,
        week_number=milestone_service.calculate_update_week(update_date, pregnancy.conception_date),
        title=title,
        content=optional_text(data.content),
        update_type=update_type,
        appointment_type=optional_text(data.appointment_type),
        is_shared=data.is_shared,
        shared_at=utc_now() if data.is_shared else None,
        update_date=update_date,
    )
    db.add(update)
    db.flush()

    _attach_media(db, update, data.photos, data.videos, start_order=0)
    db.refresh(update)

    if update.is_shared:
        _on_shared(db, update, pregnancy, session)

    logger.info("Created update %s for pregnancy %s", update.id, pregnancy.id)
    return update


def list_updates(db: Session, pregnancy_id: int, shared_only: bool = False) -> list[PregnancyUpdate]:
    """Updates for a pregnancy, newest by COALESCE(update_date, created_at) first."""
    query = (
        db.query(PregnancyUpdate)
        .options(selectinload(PregnancyUpdate.photos))
        .filter(PregnancyUpdate.pregnancy_id == pregnancy_id)
    )
    if shared_only:
        query = query.filter(PregnancyUpdate.is_shared.is_(True))
    return query.order_by(
        func.coalesce(PregnancyUpdate.update_date, PregnancyUpdate.created_at).desc(),
        PregnancyUpdate.id.desc(),
    ).all()


def get_owned_update(db: Session, user_id: int, update_id: int) -> PregnancyUpdate:
    """
    Fetch an update whose pregnancy belongs to user_id.

    Raises:
        NotFoundError: Missing or owned by someone else
    """
    update = (
        db.query(PregnancyUpdate)
        .join(Pregnancy, Pregnancy.id == PregnancyUpdate.pregnancy_id)
        .filter(PregnancyUpdate.id == update_id, Pregnancy.user_id == user_id)
        .first()
    )
    if not update:
        raise NotFoundError("Update not found or access denied")
    return update


def edit_update(
    db: Session,
    update: PregnancyUpdate,
    session: UserSession,
    data: UpdateInput,
) -> PregnancyUpdate:
    """
    Replace an update's fields and append any new media.

    The week number is recomputed from the (new) update date.
    """
    title, update_type, update_date = _validated(data)
    pregnancy = update.pregnancy
    was_shared = update.is_shared

    update.title = title
    update.content = optional_text(data.content)
    update.update_type = update_type
    update.appointment_type = optional_text(data.appointment_type)
    update.update_date = update_date
    update.week_number = milestone_service.calculate_update_week(update_date, pregnancy.conception_date)
    _apply_shared(update, data.is_shared)
    db.flush()

    if data.photos or data.videos:
        _attach_media(db, update, data.photos, data.videos, start_order=_next_sort_order(db, update.id))
    db.refresh(update)

    if update.is_shared and not was_shared:
        _on_shared(db, update, pregnancy, session)
    return update


def set_shared(
    db: Session,
    update: PregnancyUpdate,
    session: UserSession,
    is_shared: bool,
) -> PregnancyUpdate:
    was_shared = update.is_shared
    _apply_shared(update, is_shared)
    db.flush()
    if is_shared and not was_shared:
        _on_shared(db, update, update.pregnancy, session)
    return update


def _apply_shared(update: PregnancyUpdate, is_shared: bool) -> None:
    if is_shared and not update.is_shared:
        update.shared_at = utc_now()
    elif not is_shared:
        update.shared_at = None
    update.is_shared = is_shared
