"""Email service - outbox queueing, village notifications, and delivery state."""

from __future__ import annotations

import asyncio
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from fortyweeks.core.config import settings
from fortyweeks.core.structured_logging import mask_email
from fortyweeks.db.enums import (
    DELIVERY_STATUS_LABELS,
    EMAIL_TYPE_LABELS,
    FAILED_STATUSES,
    SUCCESSFUL_STATUSES,
    DeliveryStatus,
    EmailType,
    JobType,
)
from fortyweeks.db.models import (
    EmailNotification,
    Job,
    Pregnancy,
    PregnancyUpdate,
    VillageMember,
)
from fortyweeks.services import (
    email_templates,
    job_service,
    milestone_service,
    pregnancy_service,
    ses_client,
)
from fortyweeks.services.email_templates import RenderedEmail
from fortyweeks.utils.datetime_parsing import format_long_date, utc_now
from fortyweeks.utils.normalization import first_name

logger = logging.getLogger(__name__)


# =============================================================================
# Outbox
# =============================================================================

def queue_email(
    db: Session,
    to_email: str,
    email_type: EmailType,
    rendered: RenderedEmail,
    to_name: str | None = None,
    pregnancy_id: int | None = None,
    village_member_id: int | None = None,
    update_id: int | None = None,
    milestone_id: int | None = None,
    schedule_at: datetime | None = None,
) -> tuple[EmailNotification, Job]:
    """
    Queue an email for sending.

    Creates a pending EmailNotification row and schedules a job to send it.
    Flushes only; the caller commits.
    Returns (notification, job).
    """
    notification = EmailNotification(
        pregnancy_id=pregnancy_id,
        village_member_id=village_member_id,
        update_id=update_id,
        milestone_id=milestone_id,
        to_email=to_email,
        to_name=to_name,
        email_type=email_type.value,
        subject=rendered.subject,
        html_body=rendered.html_body,
        text_body=rendered.text_body,
        delivery_status=DeliveryStatus.PENDING.value,
    )
    db.add(notification)
    db.flush()  # Get ID before creating job

    job = job_service.schedule_job(
        db=db,
        job_type=JobType.SEND_EMAIL,
        payload={"email_notification_id": notification.id},
        run_at=schedule_at,
    )

    notification.job_id = job.id
    db.flush()
    return notification, job


def queue_best_effort(db: Session, queue_callable, description: str) -> int:
    """
    Run an enqueue callable inside a SAVEPOINT.

    Returns how many emails were queued. Failures are logged and rolled back
    to the savepoint; they never reach the HTTP caller.
    """
    try:
        with db.begin_nested():
            return queue_callable()
    except Exception:
        logger.exception("Failed to queue %s", description)
        return 0


async def deliver(db: Session, notification: EmailNotification) -> EmailNotification:
    """
    Send a queued notification through SES and record the result.

    The blocking SES call runs in a worker thread; the session stays on the
    event loop thread.
    """
    message_id = await asyncio.to_thread(
        ses_client.send_email,
        to_email=notification.to_email,
        subject=notification.subject,
        html_body=notification.html_body,
        text_body=notification.text_body,
    )
    logger.info(
        "Email sent for notification=%s recipient=%s message_id=%s",
        notification.id,
        mask_email(notification.to_email),
        message_id,
    )
    return mark_email_sent(db, notification, message_id)


def mark_email_sent(
    db: Session,
    notification: EmailNotification,
    ses_message_id: str | None = None,
) -> EmailNotification:
    """Mark an email as sent."""
    notification.delivery_status = DeliveryStatus.SENT.value
    notification.sent_at = utc_now()
    notification.ses_message_id = ses_message_id
    notification.error = None
    db.commit()
    db.refresh(notification)
    return notification


def mark_email_failed(db: Session, notification: EmailNotification, error: str) -> EmailNotification:
    """Mark an email as failed."""
    notification.delivery_status = DeliveryStatus.FAILED.value
    notification.error = error
    db.commit()
    db.refresh(notification)
    return notification


def get_notification(db: Session, notification_id: int) -> EmailNotification | None:
    return db.query(EmailNotification).filter(EmailNotification.id == notification_id).first()


# =============================================================================
# Template context
# =============================================================================

def timeline_url(pregnancy: Pregnancy) -> str:
    return f"{settings.base_url}/view/{pregnancy.share_id}"


def cover_photo_url(pregnancy: Pregnancy) -> str | None:
    if not pregnancy.cover_photo_filename:
        return None
    return f"{settings.base_url}/images/covers/{pregnancy.cover_photo_filename}"


def unsubscribe_url(member: VillageMember) -> str:
    return f"{settings.base_url}/email/unsubscribe/{member.unsubscribe_token}"


def ensure_unsubscribe_token(member: VillageMember) -> str:
    if not member.unsubscribe_token:
        member.unsubscribe_token = secrets.token_urlsafe(24)
    return member.unsubscribe_token


def _pregnancy_context(pregnancy: Pregnancy) -> dict[str, object]:
    return {
        "sender_name": settings.SENDER_NAME,
        "parent_names": pregnancy_service.parent_names(pregnancy),
        "due_date": format_long_date(pregnancy.due_date),
        "current_week": milestone_service.pregnancy_current_week(pregnancy),
        "timeline_url": timeline_url(pregnancy),
    }


def notification_recipients(db: Session, pregnancy_id: int) -> list[VillageMember]:
    """Village members who can receive updates: has an email and still subscribed."""
    return (
        db.query(VillageMember)
        .filter(
            VillageMember.pregnancy_id == pregnancy_id,
            VillageMember.email != "",
            VillageMember.is_subscribed.is_(True),
        )
        .order_by(VillageMember.created_at.asc(), VillageMember.id.asc())
        .all()
    )


# =============================================================================
# Notifications
# =============================================================================

def queue_update_notifications(
    db: Session,
    update: PregnancyUpdate,
    pregnancy: Pregnancy,
) -> int:
    """Queue one update email per subscribed village member. Returns the count."""
    recipients = notification_recipients(db, pregnancy.id)
    if not recipients:
        logger.info("No village members to notify for pregnancy %s", pregnancy.id)
        return 0

    base = _pregnancy_context(pregnancy)
    base.update(
        {
            "update_title": update.title,
            "update_content": update.content or "",
            "update_week": update.week_number,
            "update_date": format_long_date((update.update_date or update.created_at or utc_now()).date()),
            "photo_count": len(update.photos),
        }
    )

    for member in recipients:
        ensure_unsubscribe_token(member)
        variables = dict(base)
        variables["recipient_name"] = first_name(member.name) or member.name
        variables["unsubscribe_url"] = unsubscribe_url(member)
        queue_email(
            db,
            to_email=member.email,
            to_name=member.name,
            email_type=EmailType.UPDATE,
            rendered=email_templates.build_update_email(variables),
            pregnancy_id=pregnancy.id,
            village_member_id=member.id,
            update_id=update.id,
        )

    logger.info(
        "Queued %d update notifications for pregnancy %s update %s",
        len(recipients),
        pregnancy.id,
        update.id,
    )
    return len(recipients)


def queue_milestone_notifications(db: Session, milestone, pregnancy: Pregnancy) -> int:
    """Queue a milestone email per subscribed village member."""
    recipients = notification_recipients(db, pregnancy.id)
    base = _pregnancy_context(pregnancy)
    base.update(
        {
            "milestone_title": milestone.title,
            "milestone_week": milestone.week_number or "",
            "milestone_date": format_long_date(milestone.scheduled_date) if milestone.scheduled_date else "",
            "milestone_type": milestone_service.display_title(milestone),
        }
    )
    for member in recipients:
        ensure_unsubscribe_token(member)
        variables = dict(base)
        variables["recipient_name"] = member.name
        variables["unsubscribe_url"] = unsubscribe_url(member)
        queue_email(
            db,
            to_email=member.email,
            to_name=member.name,
            email_type=EmailType.MILESTONE,
            rendered=email_templates.build_milestone_email(variables),
            pregnancy_id=pregnancy.id,
            village_member_id=member.id,
            milestone_id=milestone.id,
        )
    return len(recipients)


def queue_welcome_email(db: Session, member: VillageMember, pregnancy: Pregnancy) -> int:
    ensure_unsubscribe_token(member)
    variables = _pregnancy_context(pregnancy)
    variables.update(
        {
            "recipient_name": member.name,
            "cover_photo_url": cover_photo_url(pregnancy),
            "unsubscribe_url": unsubscribe_url(member),
        }
    )
    queue_email(
        db,
        to_email=member.email,
        to_name=member.name,
        email_type=EmailType.WELCOME,
        rendered=email_templates.build_welcome_email(variables),
        pregnancy_id=pregnancy.id,
        village_member_id=member.id,
    )
    return 1


def queue_access_request_email(
    db: Session,
    pregnancy: Pregnancy,
    requester_name: str,
    requester_email: str,
    relationship: str,
    message: str | None,
) -> int:
    """Tell the pregnancy owner about a new access request."""
    owner = pregnancy.user
    if not owner or not owner.email:
        return 0
    variables = _pregnancy_context(pregnancy)
    variables.update(
        {
            "requester_name": requester_name,
            "requester_email": requester_email,
            "requester_relationship": relationship,
            "requester_message": message,
            "dashboard_url": f"{settings.base_url}/dashboard",
        }
    )
    queue_email(
        db,
        to_email=owner.email,
        to_name=owner.name,
        email_type=EmailType.ACCESS_REQUEST,
        rendered=email_templates.build_access_request_email(variables),
        pregnancy_id=pregnancy.id,
    )
    return 1


def queue_test_email(db: Session, to_email: str, to_name: str | None) -> EmailNotification:
    name = to_name or "Test User"
    variables = {
        "sender_name": settings.SENDER_NAME,
        "recipient_name": name,
        "timeline_url": f"{settings.base_url}/test",
        "sent_at": utc_now().strftime("%B %d, %Y %I:%M %p UTC"),
    }
    notification, _ = queue_email(
        db,
        to_email=to_email,
        to_name=name,
        email_type=EmailType.TEST,
        rendered=email_templates.build_test_email(variables),
    )
    return notification


# =============================================================================
# Reporting
# =============================================================================

@dataclass
class EmailStatistics:
    total_sent: int
    total_delivered: int
    total_failed: int
    total_bounced: int
    delivery_rate: float

    def to_dict(self) -> dict:
        return {
            "total_sent": self.total_sent,
            "total_delivered": self.total_delivered,
            "total_failed": self.total_failed,
            "total_bounced": self.total_bounced,
            "delivery_rate": self.delivery_rate,
        }


def get_statistics(db: Session, pregnancy_id: int) -> EmailStatistics:
    """Counts by delivery status. delivery_rate is delivered / total * 100."""
    row = (
        db.query(
            func.count(EmailNotification.id),
            func.sum(case((EmailNotification.delivery_status == DeliveryStatus.DELIVERED.value, 1), else_=0)),
            func.sum(case((EmailNotification.delivery_status.in_(FAILED_STATUSES), 1), else_=0)),
            func.sum(case((EmailNotification.delivery_status == DeliveryStatus.BOUNCED.value, 1), else_=0)),
        )
        .filter(EmailNotification.pregnancy_id == pregnancy_id)
        .one()
    )
    total, delivered, failed, bounced = (int(value or 0) for value in row)
    rate = (delivered / total * 100) if total else 0.0
    return EmailStatistics(
        total_sent=total,
        total_delivered=delivered,
        total_failed=failed,
        total_bounced=bounced,
        delivery_rate=rate,
    )


def list_notifications(
    db: Session,
    pregnancy_id: int,
    limit: int,
    offset: int,
) -> list[dict]:
    """Village-member notifications for a pregnancy, most recent first."""
    rows = (
        db.query(EmailNotification, VillageMember.name, VillageMember.email)
        .join(VillageMember, EmailNotification.village_member_id == VillageMember.id)
        .filter(EmailNotification.pregnancy_id == pregnancy_id)
        .order_by(
            func.coalesce(EmailNotification.sent_at, EmailNotification.created_at).desc(),
            EmailNotification.id.desc(),
        )
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [
        {
            "id": notification.id,
            "email_type": notification.email_type,
            "display_type": EMAIL_TYPE_LABELS.get(notification.email_type, notification.email_type),
            "subject": notification.subject,
            "recipient_name": recipient_name,
            "recipient_email": recipient_email,
            "sent_at": notification.sent_at,
            "delivery_status": notification.delivery_status,
            "display_status": DELIVERY_STATUS_LABELS.get(
                notification.delivery_status, notification.delivery_status
            ),
            "is_successful": notification.delivery_status in SUCCESSFUL_STATUSES,
            "is_failed": notification.delivery_status in FAILED_STATUSES,
            "ses_message_id": notification.ses_message_id,
            "created_at": notification.created_at,
        }
        for notification, recipient_name, recipient_email in rows
    ]


def check_configuration() -> tuple[bool, str]:
    """Probe SES with get_send_quota. Returns (ok, message)."""
    try:
        ses_client.get_send_quota()
    except ses_client.EmailDisabledError as exc:
        return False, f"Email configuration test failed: {exc}"
    except Exception as exc:
        logger.warning("SES configuration probe failed: %s", type(exc).__name__)
        return False, f"Email configuration test failed: {exc}"
    return True, "Email configuration is working correctly"
