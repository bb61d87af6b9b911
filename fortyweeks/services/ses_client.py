"""Thin AWS SES wrapper (boto3)."""

from __future__ import annotations

import logging
from functools import lru_cache

import boto3
from botocore.config import Config

from fortyweeks.core.config import settings
from fortyweeks.core.structured_logging import mask_email

logger = logging.getLogger(__name__)

CHARSET = "UTF-8"


class EmailDisabledError(RuntimeError):
    """Raised by probes that need a live SES client while email is disabled."""


@lru_cache(maxsize=1)
def get_ses_client():
    """Build (once) the SES client with connect/read timeouts."""
    kwargs = {
        "region_name": settings.AWS_REGION,
        "config": Config(
            connect_timeout=settings.SES_TIMEOUT_SECONDS,
            read_timeout=settings.SES_TIMEOUT_SECONDS,
            retries={"max_attempts": 2},
        ),
    }
    # Fall back to the default credential chain when keys are not configured.
    if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
    return boto3.client("ses", **kwargs)


def send_email(
    to_email: str,
    subject: str,
    html_body: str,
    text_body: str,
) -> str | None:
    """
    Send one message through SES.

    Returns the SES MessageId, or None when email is disabled (the send is
    logged and skipped). botocore errors propagate to the caller.
    """
    if not settings.EMAIL_ENABLED:
        logger.info(
            "[DRY RUN] Email disabled, would send %r to %s",
            subject,
            mask_email(to_email),
        )
        return None

    response = get_ses_client().send_email(
        Source=settings.sender_identity,
        Destination={"ToAddresses": [to_email]},
        Message={
            "Subject": {"Data": subject, "Charset": CHARSET},
            "Body": {
                "Html": {"Data": html_body, "Charset": CHARSET},
                "Text": {"Data": text_body, "Charset": CHARSET},
            },
        },
    )
    return response.get("MessageId")


def get_send_quota() -> dict:
    """Probe SES credentials/region. Raises EmailDisabledError when disabled."""
    if not settings.EMAIL_ENABLED:
        raise EmailDisabledError("email service is disabled")
    return get_ses_client().get_send_quota()
