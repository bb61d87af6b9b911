"""Timeline service - the combined events + updates feed and the public view."""

from __future__ import annotations

from collections import defaultdict

from sqlalchemy import func, literal, null, select, union_all
from sqlalchemy.orm import Session

from fortyweeks.db.enums import EventType
from fortyweeks.db.models import Pregnancy, PregnancyEvent, PregnancyUpdate, UpdatePhoto, User
from fortyweeks.services import media_service, milestone_service, pregnancy_service
from fortyweeks.utils.datetime_parsing import format_rfc3339, normalize_timestamp


def media_url(pregnancy_id: int, filename: str) -> str:
    """Public URL for an update photo or video."""
    prefix = "videos" if media_service.is_video_filename(filename) else "images"
    return f"/{prefix}/{pregnancy_id}/{filename}"


def _photo_dict(photo: UpdatePhoto, pregnancy_id: int) -> dict:
    return {
        "id": photo.id,
        "update_id": photo.update_id,
        "filename": photo.filename,
        "original_filename": photo.original_filename,
        "file_size": photo.file_size,
        "caption": photo.caption,
        "sort_order": photo.sort_order,
        "created_at": format_rfc3339(photo.created_at),
        "url": media_url(pregnancy_id, photo.filename),
        "is_video": media_service.is_video_filename(photo.filename),
    }


def photos_by_update(db: Session, pregnancy_id: int, update_ids: list[int]) -> dict[int, list[dict]]:
    """Photos for several updates in one query, keyed by update id."""
    grouped: dict[int, list[dict]] = defaultdict(list)
    if not update_ids:
        return grouped
    photos = (
        db.query(UpdatePhoto)
        .filter(UpdatePhoto.update_id.in_(update_ids))
        .order_by(UpdatePhoto.update_id, UpdatePhoto.sort_order, UpdatePhoto.id)
        .all()
    )
    for photo in photos:
        grouped[photo.update_id].append(_photo_dict(photo, pregnancy_id))
    return grouped


def _combined_query(pregnancy_id: int):
    events = (
        select(
            literal("event").label("type"),
            PregnancyEvent.id.label("item_id"),
            PregnancyEvent.title.label("title"),
            PregnancyEvent.description.label("description"),
            PregnancyEvent.event_type.label("event_type"),
            null().label("update_type"),
            null().label("is_shared"),
            PregnancyEvent.week_number.label("week_number"),
            PregnancyEvent.created_at.label("sort_date"),
            User.name.label("created_by"),
        )
        .select_from(PregnancyEvent)
        .outerjoin(User, User.id == PregnancyEvent.created_by)
        .where(
            PregnancyEvent.pregnancy_id == pregnancy_id,
            PregnancyEvent.event_type != EventType.UPDATE_POSTED.value,
        )
    )
    updates = (
        select(
            literal("update").label("type"),
            PregnancyUpdate.id.label("item_id"),
            PregnancyUpdate.title.label("title"),
            PregnancyUpdate.content.label("description"),
            null().label("event_type"),
            PregnancyUpdate.update_type.label("update_type"),
            PregnancyUpdate.is_shared.label("is_shared"),
            PregnancyUpdate.week_number.label("week_number"),
            func.coalesce(PregnancyUpdate.update_date, PregnancyUpdate.created_at).label("sort_date"),
            User.name.label("created_by"),
        )
        .select_from(PregnancyUpdate)
        .join(Pregnancy, Pregnancy.id == PregnancyUpdate.pregnancy_id)
        .join(User, User.id == Pregnancy.user_id)
        .where(PregnancyUpdate.pregnancy_id == pregnancy_id)
    )
    return union_all(events, updates).subquery("timeline")


def count_combined(db: Session, pregnancy_id: int) -> int:
    events = (
        db.query(func.count(PregnancyEvent.id))
        .filter(
            PregnancyEvent.pregnancy_id == pregnancy_id,
            PregnancyEvent.event_type != EventType.UPDATE_POSTED.value,
        )
        .scalar()
    )
    updates = (
        db.query(func.count(PregnancyUpdate.id))
        .filter(PregnancyUpdate.pregnancy_id == pregnancy_id)
        .scalar()
    )
    return (events or 0) + (updates or 0)


def get_combined_timeline(
    db: Session,
    pregnancy_id: int,
    limit: int,
    offset: int,
) -> list[dict]:
    """
    Events and updates for the owner's timeline, newest first.

    update_posted events are left out because the update itself is listed.
    Ties on the sort date are broken by item id, descending.
    """
    timeline = _combined_query(pregnancy_id)
    rows = db.execute(
        select(timeline)
        .order_by(timeline.c.sort_date.desc(), timeline.c.item_id.desc())
        .limit(limit)
        .offset(offset)
    ).all()

    update_ids = [row.item_id for row in rows if row.type == "update"]
    photos = photos_by_update(db, pregnancy_id, update_ids)

    items = []
    for row in rows:
        is_update = row.type == "update"
        items.append(
            {
                "id": row.item_id,
                "type": row.type,
                "title": row.title,
                "description": row.description,
                "week_number": row.week_number,
                "created_at": normalize_timestamp(row.sort_date),
                "event_type": row.event_type,
                "update_type": row.update_type,
                "photos": photos.get(row.item_id, []) if is_update else [],
                "is_shared": bool(row.is_shared) if is_update else None,
                "pregnancy_id": pregnancy_id,
                "created_by": row.created_by,
            }
        )
    return items


def get_public_timeline(
    db: Session,
    pregnancy: Pregnancy,
    limit: int,
    offset: int,
) -> tuple[list[dict], int]:
    """Shared updates only, newest first, with UTC RFC 3339 dates."""
    sort_date = func.coalesce(PregnancyUpdate.update_date, PregnancyUpdate.created_at)
    query = db.query(PregnancyUpdate).filter(
        PregnancyUpdate.pregnancy_id == pregnancy.id,
        PregnancyUpdate.is_shared.is_(True),
    )
    total = query.count()
    updates = (
        query.order_by(sort_date.desc(), PregnancyUpdate.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )

    owner_name = pregnancy.user.name if pregnancy.user else ""
    photos = photos_by_update(db, pregnancy.id, [u.id for u in updates])
    items = [
        {
            "id": update.id,
            "title": update.title,
            "description": update.content,
            "week_number": update.week_number,
            "update_date": normalize_timestamp(update.update_date or update.created_at),
            "created_by": owner_name,
            "photos": photos.get(update.id, []),
            "pregnancy_id": pregnancy.id,
        }
        for update in updates
    ]
    return items, total


def public_pregnancy_summary(pregnancy: Pregnancy) -> dict:
    """Header block for the public timeline."""
    return {
        "parent_names": pregnancy_service.parent_first_names(pregnancy) or "Parent",
        "baby_name": pregnancy_service.display_baby_name(pregnancy),
        "due_date": pregnancy.due_date.isoformat(),
        "current_week": milestone_service.pregnancy_current_week(pregnancy),
    }
