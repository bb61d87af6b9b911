"""Tests for the email outbox, the worker, admin email endpoints, and unsubscribe."""
import threading
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError
from httpx import AsyncClient

from fortyweeks.core.config import settings
from fortyweeks.db.enums import EmailType, JobStatus
from fortyweeks.db.models import EmailNotification, Job, VillageMember
from fortyweeks.services import email_service, job_service, ses_client
from fortyweeks.services.email_templates import RenderedEmail
from fortyweeks.worker import run_pending_jobs


def _queue(db, to_email: str = "pat@example.com", pregnancy_id=None):
    notification, job = email_service.queue_email(
        db,
        to_email=to_email,
        email_type=EmailType.TEST,
        rendered=RenderedEmail(subject="Hello", html_body="<p>Hi</p>", text_body="Hi"),
        pregnancy_id=pregnancy_id,
    )
    db.commit()
    return notification, job


@pytest.fixture
def live_ses(monkeypatch):
    """Enable sending and hand back the fake SES client."""
    monkeypatch.setattr(settings, "EMAIL_ENABLED", True)
    fake_client = MagicMock()
    fake_client.send_email.return_value = {"MessageId": "ses-123"}
    with patch.object(ses_client, "get_ses_client", return_value=fake_client):
        yield fake_client


# =============================================================================
# Outbox and worker
# =============================================================================

def test_queue_email_creates_notification_and_job(db):
    notification, job = _queue(db)

    assert notification.delivery_status == "pending"
    assert notification.job_id == job.id
    assert job.status == JobStatus.PENDING.value
    assert job.payload == {"email_notification_id": notification.id}
    assert job.max_attempts == settings.JOB_MAX_ATTEMPTS
    assert job_service.get_pending_jobs(db) == [job]


@pytest.mark.asyncio
async def test_worker_sends_and_marks_sent(db, live_ses):
    notification, job = _queue(db)

    completed, failed = await run_pending_jobs(db)
    assert (completed, failed) == (1, 0)

    db.refresh(notification)
    db.refresh(job)
    assert notification.delivery_status == "sent"
    assert notification.ses_message_id == "ses-123"
    assert notification.sent_at is not None
    assert job.status == JobStatus.COMPLETED.value
    assert job.attempts == 1

    kwargs = live_ses.send_email.call_args.kwargs
    assert kwargs["Destination"] == {"ToAddresses": ["pat@example.com"]}
    assert kwargs["Message"]["Subject"]["Data"] == "Hello"
    assert kwargs["Source"] == settings.sender_identity


@pytest.mark.asyncio
async def test_ses_call_runs_off_the_event_loop_thread(db, live_ses):
    notification, _ = _queue(db)
    loop_thread = threading.get_ident()
    send_threads = []

    def fake_send(**kwargs):
        send_threads.append(threading.get_ident())
        return {"MessageId": "ses-456"}

    live_ses.send_email.side_effect = fake_send

    assert await run_pending_jobs(db) == (1, 0)
    assert len(send_threads) == 1
    assert send_threads[0] != loop_thread

    db.refresh(notification)
    assert notification.ses_message_id == "ses-456"


@pytest.mark.asyncio
async def test_worker_dry_run_when_disabled(db):
    notification, _ = _queue(db)

    with patch.object(ses_client, "get_ses_client") as get_client:
        completed, _ = await run_pending_jobs(db)

    get_client.assert_not_called()
    assert completed == 1
    db.refresh(notification)
    assert notification.delivery_status == "sent"
    assert notification.ses_message_id is None


@pytest.mark.asyncio
async def test_failed_send_retries_then_fails(db, live_ses, monkeypatch):
    monkeypatch.setattr(settings, "JOB_RETRY_DELAY_SECONDS", 0)
    live_ses.send_email.side_effect = ClientError(
        {"Error": {"Code": "MessageRejected", "Message": "Email address is not verified"}},
        "SendEmail",
    )
    notification, job = _queue(db)

    for attempt in range(1, job.max_attempts):
        assert await run_pending_jobs(db) == (0, 1)
        db.refresh(notification)
        db.refresh(job)
        assert job.attempts == attempt
        assert job.status == JobStatus.PENDING.value
        assert notification.delivery_status == "pending"
        assert "not verified" in notification.error

    assert await run_pending_jobs(db) == (0, 1)
    db.refresh(notification)
    db.refresh(job)
    assert job.status == JobStatus.FAILED.value
    assert notification.delivery_status == "failed"

    # Exhausted jobs are not picked up again
    assert await run_pending_jobs(db) == (0, 0)


@pytest.mark.asyncio
async def test_failed_send_waits_before_retry(db, live_ses):
    live_ses.send_email.side_effect = RuntimeError("timeout")
    _, job = _queue(db)

    assert await run_pending_jobs(db) == (0, 1)
    db.refresh(job)
    assert job.status == JobStatus.PENDING.value
    assert job.last_error == "timeout"
    # Not due again until the retry delay passes
    assert await run_pending_jobs(db) == (0, 0)


@pytest.mark.asyncio
async def test_unknown_job_type_fails(db):
    job = Job(job_type="mystery", payload={})
    db.add(job)
    db.commit()

    assert await run_pending_jobs(db) == (0, 1)
    db.refresh(job)
    assert job.last_error == "Unknown job type: mystery"


@pytest.mark.asyncio
async def test_already_sent_notification_is_skipped(db, live_ses):
    notification, _ = _queue(db)
    email_service.mark_email_sent(db, notification, "earlier")

    assert await run_pending_jobs(db) == (1, 0)
    live_ses.send_email.assert_not_called()
    db.refresh(notification)
    assert notification.ses_message_id == "earlier"


# =============================================================================
# Admin endpoints
# =============================================================================

@pytest.fixture
def admin(user_factory):
    return user_factory("Admin Parent", "admin@example.com", is_admin=True)


async def _admin_pregnancy(client: AsyncClient, admin) -> dict:
    response = await client.post("/api/pregnancy", json={"due_date": "2027-03-01"}, headers=admin.headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_admin_endpoints_require_admin(authed_client: AsyncClient, test_pregnancy):
    response = await authed_client.get("/api/email/statistics")
    assert response.status_code == 403
    assert response.json()["detail"] == "Admin access required"


@pytest.mark.asyncio
async def test_admin_test_email_is_queued(authed_client: AsyncClient, admin, db):
    response = await authed_client.post(
        "/api/email/test", json={"to_email": "qa@example.com"}, headers=admin.headers
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Test email queued for qa@example.com"}

    notification = db.query(EmailNotification).one()
    assert notification.email_type == "test"
    assert notification.to_name == "Test User"
    assert db.get(Job, notification.job_id).status == "pending"

    missing = await authed_client.post("/api/email/test", json={}, headers=admin.headers)
    assert missing.status_code == 400
    assert missing.json()["detail"] == "to_email is required"


@pytest.mark.asyncio
async def test_admin_config_reports_disabled(authed_client: AsyncClient, admin):
    response = await authed_client.get("/api/email/config", headers=admin.headers)
    assert response.status_code == 500
    assert response.json()["success"] is False
    assert response.json()["message"].startswith("Email configuration test failed")


@pytest.mark.asyncio
async def test_admin_config_ok(authed_client: AsyncClient, admin, live_ses):
    live_ses.get_send_quota.return_value = {"Max24HourSend": 200.0}
    response = await authed_client.get("/api/email/config", headers=admin.headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Email configuration is working correctly"}


@pytest.mark.asyncio
async def test_admin_statistics_and_notifications(authed_client: AsyncClient, admin, db):
    no_pregnancy = await authed_client.get("/api/email/statistics", headers=admin.headers)
    assert no_pregnancy.status_code == 404

    await _admin_pregnancy(authed_client, admin)
    await authed_client.post(
        "/api/village-members/bulk",
        json={"name": "Pals", "emails": ["a@example.com", "b@example.com"], "relationship": "friend"},
        headers=admin.headers,
    )
    await authed_client.post(
        "/api/updates", json={"title": "Hi all", "is_shared": True}, headers=admin.headers
    )

    rows = db.query(EmailNotification).order_by(EmailNotification.id).all()
    rows[0].delivery_status = "delivered"
    rows[1].delivery_status = "bounced"
    db.commit()

    stats = await authed_client.get("/api/email/statistics", headers=admin.headers)
    assert stats.json() == {
        "total_sent": 2,
        "total_delivered": 1,
        "total_failed": 1,
        "total_bounced": 1,
        "delivery_rate": 50.0,
    }

    listing = await authed_client.get(
        "/api/email/notifications", params={"limit": 1}, headers=admin.headers
    )
    data = listing.json()
    assert data["total"] == 1
    assert data["limit"] == 1
    item = data["notifications"][0]
    assert item["recipient_email"] in {"a@example.com", "b@example.com"}
    assert item["display_type"] == "Pregnancy Update"

    too_big = await authed_client.get(
        "/api/email/notifications", params={"limit": 500}, headers=admin.headers
    )
    assert too_big.status_code == 422


@pytest.mark.asyncio
async def test_admin_resend_update_notification(authed_client: AsyncClient, admin, test_pregnancy, db):
    await _admin_pregnancy(authed_client, admin)
    await authed_client.post(
        "/api/village-members",
        json={"name": "Pat", "email": "pat@example.com", "relationship": "friend"},
        headers=admin.headers,
    )
    created = await authed_client.post("/api/updates", json={"title": "Quiet"}, headers=admin.headers)
    update_id = created.json()["id"]

    response = await authed_client.post(
        "/api/email/send-update-notification", json={"update_id": update_id}, headers=admin.headers
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Update notification queued for 1 village members"
    assert db.query(EmailNotification).filter(EmailNotification.update_id == update_id).count() == 1

    missing = await authed_client.post(
        "/api/email/send-update-notification", json={}, headers=admin.headers
    )
    assert missing.status_code == 400

    # Another owner's update is not reachable
    theirs = await authed_client.post("/api/updates", json={"title": "Jane's"})
    foreign = await authed_client.post(
        "/api/email/send-update-notification",
        json={"update_id": theirs.json()["id"]},
        headers=admin.headers,
    )
    assert foreign.status_code == 404


# =============================================================================
# Unsubscribe
# =============================================================================

@pytest.mark.asyncio
async def test_unsubscribe_link(authed_client: AsyncClient, client: AsyncClient, test_pregnancy, db):
    created = await authed_client.post(
        "/api/village-members",
        json={"name": "Pat", "email": "pat@example.com", "relationship": "friend"},
    )
    member = db.get(VillageMember, created.json()["id"])

    response = await client.get(f"/email/unsubscribe/{member.unsubscribe_token}")
    assert response.status_code == 200
    assert "Unsubscribed" in response.text
    db.refresh(member)
    assert member.is_subscribed is False
    assert email_service.notification_recipients(db, test_pregnancy.id) == []

    # One-click POST is idempotent
    again = await client.post(f"/email/unsubscribe/{member.unsubscribe_token}")
    assert again.status_code == 200


@pytest.mark.asyncio
async def test_unsubscribe_unknown_token(client: AsyncClient):
    response = await client.get("/email/unsubscribe/not-a-token")
    assert response.status_code == 200
    assert "Unsubscribe request received" in response.text
