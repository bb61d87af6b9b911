"""Timeline access - email verification and the access-request workflow."""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from fortyweeks.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from fortyweeks.core.structured_logging import mask_email
from fortyweeks.db.enums import AccessRequestAction, AccessRequestStatus
from fortyweeks.db.models import AccessRequest, Pregnancy, User, VillageMember
from fortyweeks.services import email_service, village_service
from fortyweeks.utils.datetime_parsing import utc_now
from fortyweeks.utils.normalization import normalize_email, normalize_text, optional_text

logger = logging.getLogger(__name__)

ACTION_PAST_TENSE = {
    AccessRequestAction.APPROVE: "approved",
    AccessRequestAction.DENY: "denied",
}


def has_access(db: Session, pregnancy: Pregnancy, email: str | None) -> bool:
    """
    True iff the email belongs to the owner, the partner, or a village member.

    Comparison is trimmed and case-insensitive.
    """
    normalized = normalize_email(email)
    if not normalized:
        return False

    owner = pregnancy.user or db.query(User).filter(User.id == pregnancy.user_id).first()
    if owner and normalize_email(owner.email) == normalized:
        return True
    if normalize_email(pregnancy.partner_email) == normalized:
        return True

    member_id = (
        db.query(VillageMember.id)
        .filter(
            VillageMember.pregnancy_id == pregnancy.id,
            func.lower(func.trim(VillageMember.email)) == normalized,
        )
        .first()
    )
    return member_id is not None


def get_pending_request_by_email(db: Session, pregnancy_id: int, email: str) -> AccessRequest | None:
    return (
        db.query(AccessRequest)
        .filter(
            AccessRequest.pregnancy_id == pregnancy_id,
            func.lower(AccessRequest.email) == email,
            AccessRequest.status == AccessRequestStatus.PENDING.value,
        )
        .first()
    )


def request_access(
    db: Session,
    pregnancy: Pregnancy,
    email: str | None,
    name: str | None,
    relationship: str | None,
    message: str | None = None,
) -> AccessRequest:
    """
    Record a pending access request and notify the owner.

    Raises:
        ValueError: Missing email, name, or relationship
        ConflictError: Already a member, or a pending request exists
    """
    normalized_email = normalize_email(email)
    name = normalize_text(name)
    relationship = normalize_text(relationship)
    if not normalized_email or not name or not relationship:
        raise ValueError("Email, name, and relationship are required")

    if village_service.get_member_by_email(db, pregnancy.id, normalized_email):
        raise ConflictError("You are already a member of this village")
    if get_pending_request_by_email(db, pregnancy.id, normalized_email):
        raise ConflictError("You already have a pending access request for this pregnancy")

    access_request = AccessRequest(
        pregnancy_id=pregnancy.id,
        email=normalized_email,
        name=name,
        relationship=relationship,
        message=optional_text(message),
        status=AccessRequestStatus.PENDING.value,
    )
    db.add(access_request)
    db.flush()
    logger.info(
        "Access request %s stored for pregnancy %s (%s)",
        access_request.id,
        pregnancy.id,
        mask_email(normalized_email),
    )

    email_service.queue_best_effort(
        db,
        lambda: email_service.queue_access_request_email(
            db,
            pregnancy,
            requester_name=name,
            requester_email=normalized_email,
            relationship=village_service.display_relationship(relationship),
            message=access_request.message,
        ),
        "access request notification",
    )
    return access_request


def list_pending(db: Session, pregnancy_id: int) -> list[AccessRequest]:
    """Pending requests, newest first."""
    return (
        db.query(AccessRequest)
        .filter(
            AccessRequest.pregnancy_id == pregnancy_id,
            AccessRequest.status == AccessRequestStatus.PENDING.value,
        )
        .order_by(AccessRequest.created_at.desc(), AccessRequest.id.desc())
        .all()
    )


def resolve_request(
    db: Session,
    user_id: int,
    request_id: int,
    action: AccessRequestAction,
) -> dict:
    """
    Approve or deny a pending request.

    Approving adds a told village member and queues a welcome email. Either
    way the row keeps its final status and resolved_at.

    Raises:
        NotFoundError: No pending request with this id
        ForbiddenError: Request belongs to someone else's pregnancy
    """
    access_request = (
        db.query(AccessRequest)
        .filter(
            AccessRequest.id == request_id,
            AccessRequest.status == AccessRequestStatus.PENDING.value,
        )
        .first()
    )
    if not access_request:
        raise NotFoundError("Access request not found or already processed")

    pregnancy = access_request.pregnancy
    if pregnancy.user_id != user_id:
        raise ForbiddenError("Access denied: This request doesn't belong to your pregnancy")

    if action == AccessRequestAction.APPROVE:
        _approve(db, pregnancy, access_request)
        access_request.status = AccessRequestStatus.APPROVED.value
    else:
        logger.info("Access request %s denied for pregnancy %s", access_request.id, pregnancy.id)
        access_request.status = AccessRequestStatus.DENIED.value
    access_request.resolved_at = utc_now()
    db.flush()

    return {
        "status": "success",
        "action": action.value,
        "message": f"{ACTION_PAST_TENSE[action]} successfully",
    }


def _approve(db: Session, pregnancy: Pregnancy, access_request: AccessRequest) -> None:
    existing = village_service.get_member_by_email(db, pregnancy.id, access_request.email)
    if existing:
        logger.info(
            "Access request %s approved; %s is already a member",
            access_request.id,
            mask_email(access_request.email),
        )
        return

    member = VillageMember(
        pregnancy_id=pregnancy.id,
        name=access_request.name,
        email=access_request.email,
        relationship=access_request.relationship,
        is_told=True,
        told_date=utc_now(),
        is_subscribed=True,
        unsubscribe_token=village_service.generate_unsubscribe_token(),
    )
    db.add(member)
    db.flush()
    logger.info("Access request %s approved; member %s added", access_request.id, member.id)

    email_service.queue_best_effort(
        db,
        lambda: email_service.queue_welcome_email(db, member, pregnancy),
        "welcome email",
    )
