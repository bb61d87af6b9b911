"""Tests for the pregnancy record, default milestones, and cover photos."""
import io
from datetime import date, timedelta
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import IntegrityError

from fortyweeks.core.exceptions import ConflictError
from fortyweeks.db.models import Milestone, Pregnancy, PregnancyEvent
from fortyweeks.services import pregnancy_service
from fortyweeks.services.milestone_service import calculate_current_week
from fortyweeks.utils.datetime_parsing import utc_now


DUE = (date.today() + timedelta(weeks=20)).isoformat()


@pytest.mark.asyncio
async def test_no_active_pregnancy_is_404(authed_client: AsyncClient):
    response = await authed_client.get("/api/pregnancy")
    assert response.status_code == 404
    assert response.json()["detail"] == "No active pregnancy found"


@pytest.mark.asyncio
async def test_create_pregnancy_with_defaults(authed_client: AsyncClient, db):
    response = await authed_client.post(
        "/api/pregnancy",
        json={"due_date": DUE, "partner_name": "Sam", "baby_name": ""},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["due_date"] == DUE
    assert data["baby_name"] == "Baby"
    assert data["is_active"] is True
    assert len(data["share_id"]) == 32
    assert data["current_week_calculated"] == data["current_week"]

    milestones = db.query(Milestone).filter(Milestone.pregnancy_id == data["id"]).all()
    assert len(milestones) == 5
    due_milestone = next(m for m in milestones if m.milestone_type == "due_date")
    assert due_milestone.scheduled_date.isoformat() == DUE

    events = db.query(PregnancyEvent).filter(PregnancyEvent.pregnancy_id == data["id"]).all()
    assert [e.event_type for e in events] == ["pregnancy_announced"]


@pytest.mark.asyncio
async def test_second_active_pregnancy_conflicts(authed_client: AsyncClient, test_pregnancy):
    response = await authed_client.post("/api/pregnancy", json={"due_date": DUE})
    assert response.status_code == 409
    assert response.json()["detail"] == "You already have an active pregnancy"


@pytest.mark.asyncio
@pytest.mark.parametrize("due_date", ["", "2026/01/01", "not-a-date"])
async def test_create_rejects_bad_due_date(authed_client: AsyncClient, due_date):
    response = await authed_client.post("/api/pregnancy", json={"due_date": due_date})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid due date format"


@pytest.mark.asyncio
async def test_get_current_recomputes_week(authed_client: AsyncClient, test_pregnancy, db):
    test_pregnancy.current_week = 1
    db.commit()

    response = await authed_client.get("/api/pregnancy/current")
    assert response.status_code == 200
    expected = calculate_current_week(test_pregnancy.due_date)
    assert response.json()["current_week"] == expected
    assert response.json()["current_week_calculated"] == expected


@pytest.mark.asyncio
async def test_edit_pregnancy_partial(authed_client: AsyncClient, test_pregnancy, db):
    conception = (utc_now().date() - timedelta(days=70)).isoformat()
    response = await authed_client.put(
        "/api/pregnancy",
        json={"conception_date": conception, "baby_name": "Bean"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["conception_date"] == conception
    assert data["baby_name"] == "Bean"
    assert data["partner_name"] == "Sam Smith"
    assert data["current_week"] == 13

    cleared = await authed_client.put("/api/pregnancy", json={"conception_date": ""})
    assert cleared.json()["conception_date"] is None


@pytest.mark.asyncio
async def test_edit_due_date_reschedules_open_milestones(authed_client: AsyncClient, test_pregnancy, db):
    new_due = date.today() + timedelta(weeks=18)
    response = await authed_client.put("/api/pregnancy", json={"due_date": new_due.isoformat()})
    assert response.status_code == 200

    due_milestone = (
        db.query(Milestone)
        .filter(Milestone.pregnancy_id == test_pregnancy.id, Milestone.milestone_type == "due_date")
        .one()
    )
    db.refresh(due_milestone)
    assert due_milestone.scheduled_date == new_due


@pytest.mark.asyncio
async def test_edit_rejects_bad_conception_date(authed_client: AsyncClient, test_pregnancy):
    response = await authed_client.put("/api/pregnancy", json={"conception_date": "01-02-2026"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid conception date format"


@pytest.mark.asyncio
async def test_cover_photo_upload_and_delete(authed_client: AsyncClient, test_pregnancy, media_dirs):
    images, _ = media_dirs
    response = await authed_client.post(
        "/api/pregnancy/cover-photo",
        files={"cover_photo": ("cover.PNG", io.BytesIO(b"\x89PNG fake"), "image/png")},
    )
    assert response.status_code == 200
    filename = response.json()["filename"]
    assert filename.startswith(f"pregnancy_{test_pregnancy.id}_cover_")
    assert filename.endswith(".png")
    assert (images / "covers" / filename).is_file()

    served = await authed_client.get(f"/images/covers/{filename}")
    assert served.status_code == 200
    assert served.content == b"\x89PNG fake"

    deleted = await authed_client.delete("/api/pregnancy/cover-photo")
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True, "filename": None}
    assert not (images / "covers" / filename).exists()


@pytest.mark.asyncio
async def test_cover_photo_rejects_bad_type(authed_client: AsyncClient, test_pregnancy):
    response = await authed_client.post(
        "/api/pregnancy/cover-photo",
        files={"cover_photo": ("cover.gif", io.BytesIO(b"GIF89a"), "image/gif")},
    )
    assert response.status_code == 400
    assert "Invalid file type" in response.json()["detail"]


@pytest.mark.asyncio
async def test_cover_photo_size_limit(authed_client: AsyncClient, test_pregnancy, monkeypatch):
    from fortyweeks.core.config import settings

    monkeypatch.setattr(settings, "MAX_COVER_PHOTO_BYTES", 1024 * 1024)
    response = await authed_client.post(
        "/api/pregnancy/cover-photo",
        files={"cover_photo": ("cover.jpg", io.BytesIO(b"x" * (1024 * 1024 + 1)), "image/jpeg")},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "File size exceeds 1 MB limit"


def test_database_allows_one_active_pregnancy_per_user(db, test_pregnancy):
    user_id, due_date = test_pregnancy.user_id, test_pregnancy.due_date

    db.add(Pregnancy(user_id=user_id, due_date=due_date, share_id="a" * 32, is_active=True))
    with pytest.raises(IntegrityError):
        db.flush()
    db.rollback()

    db.add(Pregnancy(user_id=user_id, due_date=due_date, share_id="b" * 32, is_active=False))
    db.commit()
    assert db.query(Pregnancy).filter(Pregnancy.user_id == user_id).count() == 2
    assert (
        db.query(Pregnancy)
        .filter(Pregnancy.user_id == user_id, Pregnancy.is_active.is_(True))
        .count()
        == 1
    )


def test_create_pregnancy_conflict_when_another_insert_wins(db, test_pregnancy):
    user_id = test_pregnancy.user_id
    # Both requests passed the lookup before either inserted.
    with patch.object(pregnancy_service, "get_active_pregnancy", return_value=None):
        with pytest.raises(ConflictError, match="You already have an active pregnancy"):
            pregnancy_service.create_pregnancy(db, user_id=user_id, due_date=date.today())

    assert db.query(Pregnancy).filter(Pregnancy.user_id == user_id).count() == 1
