"""Pregnancy service - business logic for the tracked pregnancy record."""

from __future__ import annotations

import logging
import secrets
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fortyweeks.core.exceptions import ConflictError
from fortyweeks.db.models import Pregnancy, User
from fortyweeks.services import event_service, media_service, milestone_service
from fortyweeks.utils.normalization import first_name, optional_text

logger = logging.getLogger(__name__)

DEFAULT_BABY_NAME = "Baby"


def generate_share_id() -> str:
    return secrets.token_hex(16)


def get_active_pregnancy(db: Session, user_id: int) -> Pregnancy | None:
    """Most recent active pregnancy for a user."""
    return (
        db.query(Pregnancy)
        .filter(Pregnancy.user_id == user_id, Pregnancy.is_active.is_(True))
        .order_by(Pregnancy.created_at.desc(), Pregnancy.id.desc())
        .first()
    )


def get_pregnancy(db: Session, pregnancy_id: int) -> Pregnancy | None:
    return db.query(Pregnancy).filter(Pregnancy.id == pregnancy_id).first()


def get_pregnancy_by_share_id(db: Session, share_id: str) -> Pregnancy | None:
    return db.query(Pregnancy).filter(Pregnancy.share_id == share_id).first()


def create_pregnancy(
    db: Session,
    user_id: int,
    due_date: date,
    partner_name: str | None = None,
    partner_email: str | None = None,
    baby_name: str | None = None,
) -> Pregnancy:
    """
    Create a pregnancy with its default milestones and announcement event.

    Everything is flushed in the caller's transaction so the pregnancy and
    its milestones commit together. The announcement event is best-effort.

    Raises:
        ConflictError: The user already has an active pregnancy
    """
    if get_active_pregnancy(db, user_id):
        raise ConflictError("You already have an active pregnancy")

    pregnancy = Pregnancy(
        user_id=user_id,
        due_date=due_date,
        partner_name=optional_text(partner_name),
        partner_email=optional_text(partner_email),
        baby_name=optional_text(baby_name) or DEFAULT_BABY_NAME,
        current_week=milestone_service.calculate_current_week(due_date),
        share_id=generate_share_id(),
        is_active=True,
    )
    db.add(pregnancy)
    try:
        db.flush()
    except IntegrityError:
        # A concurrent request activated one first.
        db.rollback()
        raise ConflictError("You already have an active pregnancy")

    milestone_service.create_default_milestones(db, pregnancy.id, due_date)

    event_service.emit_best_effort(
        db,
        lambda: event_service.log_pregnancy_announced(
            db, pregnancy.id, user_id, pregnancy.current_week
        ),
    )
    return pregnancy


def update_pregnancy(
    db: Session,
    pregnancy: Pregnancy,
    changes: dict,
) -> Pregnancy:
    """
    Apply a partial edit.

    `changes` holds only the fields the client sent; empty strings clear
    optional text fields. A new due date reschedules open default milestones.
    """
    if "due_date" in changes and changes["due_date"] is not None:
        if changes["due_date"] != pregnancy.due_date:
            pregnancy.due_date = changes["due_date"]
            milestone_service.reschedule_default_milestones(db, pregnancy.id, pregnancy.due_date)
    if "conception_date" in changes:
        pregnancy.conception_date = changes["conception_date"]
    if "partner_name" in changes:
        pregnancy.partner_name = optional_text(changes["partner_name"])
    if "partner_email" in changes:
        pregnancy.partner_email = optional_text(changes["partner_email"])
    if "baby_name" in changes:
        pregnancy.baby_name = optional_text(changes["baby_name"]) or DEFAULT_BABY_NAME

    pregnancy.current_week = milestone_service.pregnancy_current_week(pregnancy)
    db.flush()
    return pregnancy


def refresh_current_week(db: Session, pregnancy: Pregnancy) -> int:
    """Recompute and store current_week; returns the fresh value."""
    week = milestone_service.pregnancy_current_week(pregnancy)
    if pregnancy.current_week != week:
        pregnancy.current_week = week
        db.flush()
    return week


# =============================================================================
# Display helpers
# =============================================================================

def parent_names(pregnancy: Pregnancy, owner: User | None = None) -> str:
    """'User & Partner' or just 'User'."""
    owner = owner or pregnancy.user
    owner_name = owner.name if owner else ""
    if pregnancy.partner_name:
        return f"{owner_name} & {pregnancy.partner_name}"
    return owner_name


def parent_first_names(pregnancy: Pregnancy, owner: User | None = None) -> str:
    """First names only, e.g. 'Jane & Sam'."""
    owner = owner or pregnancy.user
    owner_first = first_name(owner.name if owner else "")
    if pregnancy.partner_name:
        return f"{owner_first} & {first_name(pregnancy.partner_name)}"
    return owner_first


def display_baby_name(pregnancy: Pregnancy) -> str:
    return pregnancy.baby_name or DEFAULT_BABY_NAME


# =============================================================================
# Cover photo
# =============================================================================

def set_cover_photo(db: Session, pregnancy: Pregnancy, incoming: media_service.IncomingFile) -> str:
    """Store a new cover photo and remove the previous file."""
    filename = media_service.save_cover_photo(pregnancy.id, incoming)
    previous = pregnancy.cover_photo_filename
    pregnancy.cover_photo_filename = filename
    db.flush()
    if previous and previous != filename:
        media_service.remove_file(media_service.cover_photo_path(previous))
    return filename


def remove_cover_photo(db: Session, pregnancy: Pregnancy) -> None:
    previous = pregnancy.cover_photo_filename
    pregnancy.cover_photo_filename = None
    db.flush()
    if previous:
        media_service.remove_file(media_service.cover_photo_path(previous))
