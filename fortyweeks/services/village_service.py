"""Village service - members who follow a pregnancy."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fortyweeks.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from fortyweeks.core.structured_logging import mask_email
from fortyweeks.db.enums import DEFAULT_RELATIONSHIP_LABEL, RELATIONSHIP_LABELS, VillagerJoinSource
from fortyweeks.db.models import Pregnancy, VillageMember
from fortyweeks.services import event_service, milestone_service
from fortyweeks.utils.datetime_parsing import utc_now
from fortyweeks.utils.normalization import normalize_email, normalize_text

logger = logging.getLogger(__name__)


@dataclass
class VillageStats:
    total_members: int
    told_members: int
    subscribed_members: int
    pending_members: int

    def to_dict(self) -> dict:
        return {
            "total_members": self.total_members,
            "told_members": self.told_members,
            "subscribed_members": self.subscribed_members,
            "pending_members": self.pending_members,
        }


def generate_unsubscribe_token() -> str:
    return secrets.token_urlsafe(24)


def get_member_by_email(db: Session, pregnancy_id: int, email: str) -> VillageMember | None:
    """Case-insensitive lookup within one pregnancy."""
    normalized = normalize_email(email)
    if not normalized:
        return None
    return (
        db.query(VillageMember)
        .filter(
            VillageMember.pregnancy_id == pregnancy_id,
            func.lower(VillageMember.email) == normalized,
        )
        .first()
    )


def list_members(db: Session, pregnancy_id: int) -> list[VillageMember]:
    return (
        db.query(VillageMember)
        .filter(VillageMember.pregnancy_id == pregnancy_id)
        .order_by(VillageMember.created_at.asc(), VillageMember.id.asc())
        .all()
    )


def _new_member(
    pregnancy_id: int,
    name: str,
    email: str,
    relationship: str,
    is_told: bool,
) -> VillageMember:
    return VillageMember(
        pregnancy_id=pregnancy_id,
        name=name,
        email=email,
        relationship=relationship,
        is_told=is_told,
        told_date=utc_now() if is_told else None,
        is_subscribed=True,
        unsubscribe_token=generate_unsubscribe_token(),
    )


def _flush_members(db: Session, members: list[VillageMember], conflict_message: str) -> None:
    db.add_all(members)
    try:
        db.flush()
    except IntegrityError:
        # Lost a race with a concurrent insert of the same email.
        db.rollback()
        raise ConflictError(conflict_message)


def add_member(
    db: Session,
    pregnancy: Pregnancy,
    name: str | None,
    email: str | None,
    relationship: str | None,
    is_told: bool = False,
) -> VillageMember:
    """
    Add one member by hand.

    Raises:
        ValueError: Missing name, email, or relationship
        ConflictError: Email already in this village
    """
    name = normalize_text(name)
    normalized_email = normalize_email(email)
    relationship = normalize_text(relationship)
    if not name or not normalized_email or not relationship:
        raise ValueError("Name, email, and relationship are required")

    if get_member_by_email(db, pregnancy.id, normalized_email):
        raise ConflictError("This email is already in your village")

    member = _new_member(pregnancy.id, name, normalized_email, relationship, is_told)
    _flush_members(db, [member], "This email is already in your village")

    _emit_joined(db, pregnancy, member, VillagerJoinSource.MANUAL)
    logger.info("Added village member %s to pregnancy %s", member.id, pregnancy.id)
    return member


def add_members(
    db: Session,
    pregnancy: Pregnancy,
    name: str | None,
    emails: list[str] | None,
    relationship: str | None,
    is_told: bool = False,
    *,
    source: VillagerJoinSource = VillagerJoinSource.MANUAL,
) -> list[VillageMember]:
    """
    Add one member per email, sharing a name and relationship.

    With several emails, names get a " (i)" suffix starting at 1. All emails
    are checked before anything is written, so a conflict adds nobody.

    Raises:
        ValueError: Missing fields or an empty email
        ConflictError: An email is already in this village
    """
    name = normalize_text(name)
    relationship = normalize_text(relationship)
    if not name or not emails or not relationship:
        raise ValueError("Name, emails, and relationship are required")

    cleaned: list[str] = []
    for raw_email in emails:
        normalized_email = normalize_email(raw_email)
        if not normalized_email:
            raise ValueError("Empty email not allowed")
        cleaned.append(normalized_email)

    where = "your village" if source == VillagerJoinSource.MANUAL else "this village"
    seen: set[str] = set()
    for normalized_email in cleaned:
        if normalized_email in seen or get_member_by_email(db, pregnancy.id, normalized_email):
            raise ConflictError(f"Email {normalized_email} is already in {where}")
        seen.add(normalized_email)

    members = []
    for i, normalized_email in enumerate(cleaned, start=1):
        member_name = f"{name} ({i})" if len(cleaned) > 1 else name
        members.append(_new_member(pregnancy.id, member_name, normalized_email, relationship, is_told))
    _flush_members(db, members, f"An email is already in {where}")

    for member in members:
        _emit_joined(db, pregnancy, member, source)
    logger.info(
        "Added %d village members to pregnancy %s (source=%s)",
        len(members),
        pregnancy.id,
        source.value,
    )
    return members


def _emit_joined(
    db: Session,
    pregnancy: Pregnancy,
    member: VillageMember,
    source: VillagerJoinSource,
) -> None:
    week = milestone_service.pregnancy_current_week(pregnancy)
    if source == VillagerJoinSource.INVITE:
        emitter = event_service.log_villager_joined
    else:
        emitter = event_service.log_villager_added
    event_service.emit_best_effort(
        db,
        lambda: emitter(db, pregnancy.id, member.name, member.relationship, week),
    )


def get_owned_member(db: Session, pregnancy: Pregnancy, member_id: int) -> VillageMember:
    """
    Fetch a member and check it belongs to the caller's pregnancy.

    Raises:
        NotFoundError: No such member
        ForbiddenError: Member belongs to another pregnancy
    """
    member = db.query(VillageMember).filter(VillageMember.id == member_id).first()
    if not member:
        raise NotFoundError("Village member not found")
    if member.pregnancy_id != pregnancy.id:
        raise ForbiddenError("Forbidden")
    return member


def set_told(
    db: Session,
    pregnancy: Pregnancy,
    member: VillageMember,
    is_told: bool,
    user_id: int,
) -> VillageMember:
    """Update the told flag. Emits villager_told only on a false to true flip."""
    was_told = member.is_told
    member.is_told = is_told
    if is_told and not was_told:
        member.told_date = utc_now()
    elif not is_told:
        member.told_date = None
    db.flush()

    if is_told and not was_told:
        week = milestone_service.pregnancy_current_week(pregnancy)
        event_service.emit_best_effort(
            db,
            lambda: event_service.log_villager_told(db, pregnancy.id, member.name, user_id, week),
        )
    return member


def delete_member(db: Session, member: VillageMember) -> None:
    db.delete(member)
    db.flush()


def get_stats(db: Session, pregnancy_id: int) -> VillageStats:
    members = list_members(db, pregnancy_id)
    total = len(members)
    told = sum(1 for m in members if m.is_told)
    subscribed = sum(1 for m in members if m.is_subscribed)
    return VillageStats(
        total_members=total,
        told_members=told,
        subscribed_members=subscribed,
        pending_members=total - told,
    )


def unsubscribe(db: Session, token: str) -> VillageMember | None:
    """Turn off emails for the member holding this token. None when unknown."""
    if not token:
        return None
    member = db.query(VillageMember).filter(VillageMember.unsubscribe_token == token).first()
    if not member:
        return None
    if member.is_subscribed:
        member.is_subscribed = False
        db.flush()
        logger.info("Village member %s unsubscribed (%s)", member.id, mask_email(member.email))
    return member


# =============================================================================
# Display helpers
# =============================================================================

def display_relationship(relationship: str | None) -> str:
    if not relationship:
        return DEFAULT_RELATIONSHIP_LABEL
    return RELATIONSHIP_LABELS.get(relationship.lower(), relationship)
