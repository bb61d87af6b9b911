"""Email-related job handlers."""

from __future__ import annotations

import logging

from fortyweeks.core.structured_logging import mask_email
from fortyweeks.db.enums import DeliveryStatus
from fortyweeks.db.models import EmailNotification
from fortyweeks.services import email_service, job_service

logger = logging.getLogger(__name__)


def _load_notification(db, job) -> EmailNotification:
    notification_id = (job.payload or {}).get("email_notification_id")
    if not notification_id:
        raise Exception("Missing email_notification_id in job payload")

    notification = email_service.get_notification(db, int(notification_id))
    if not notification:
        raise Exception(f"EmailNotification {notification_id} not found")
    return notification


async def process_send_email(db, job) -> None:
    """
    Send one queued EmailNotification through SES.

    Payload:
        - email_notification_id: id of the pending notification row
    """
    notification = _load_notification(db, job)
    if notification.delivery_status != DeliveryStatus.PENDING.value:
        logger.info(
            "Skipping email_notification=%s with status=%s",
            notification.id,
            notification.delivery_status,
        )
        return

    try:
        await email_service.deliver(db, notification)
    except Exception as e:
        logger.error(
            "Email send failed for email_notification=%s recipient=%s error_class=%s",
            notification.id,
            mask_email(notification.to_email),
            e.__class__.__name__,
        )
        raise


def record_send_failure(db, job, error: str) -> None:
    """
    Reflect a failed send on the notification row.

    The row stays pending while the job will be retried and becomes failed
    once the job is out of attempts.
    """
    notification_id = (job.payload or {}).get("email_notification_id")
    if not notification_id:
        return
    notification = email_service.get_notification(db, int(notification_id))
    if not notification:
        return

    if job_service.is_exhausted(job):
        email_service.mark_email_failed(db, notification, error)
    else:
        notification.error = error
        db.commit()
