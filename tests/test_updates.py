"""Tests for updates: creation, media, editing, and sharing."""
import io
import json

import pytest
from httpx import AsyncClient

from fortyweeks.db.models import EmailNotification, Job, PregnancyEvent


async def _add_member(client: AsyncClient, email: str = "pat@example.com") -> dict:
    response = await client.post(
        "/api/village-members",
        json={"name": "Pat Jones", "email": email, "relationship": "friend"},
    )
    assert response.status_code == 201
    return response.json()


def _multipart(data: dict, photos=(), videos=()) -> dict:
    files = [("data", (None, json.dumps(data)))]
    files += [("photos", (name, io.BytesIO(content), "image/jpeg")) for name, content in photos]
    files += [("videos", (name, io.BytesIO(content), "video/mp4")) for name, content in videos]
    return {"files": files}


@pytest.mark.asyncio
async def test_create_update_with_media(authed_client: AsyncClient, test_pregnancy, media_dirs):
    images, videos = media_dirs
    response = await authed_client.post(
        "/api/updates",
        **_multipart(
            {"title": "First scan", "content": "All good", "update_type": "appointment"},
            photos=[("scan.jpg", b"jpeg-1"), ("scan2.JPG", b"jpeg-2")],
            videos=[("heartbeat.mp4", b"mp4"), ("clip.avi", b"avi")],
        ),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "First scan"
    assert data["update_type"] == "appointment"
    assert data["is_shared"] is False
    assert data["update_date"]

    photos = data["photos"]
    assert [p["sort_order"] for p in photos] == [0, 1, 2]
    assert [p["original_filename"] for p in photos] == ["scan.jpg", "scan2.JPG", "heartbeat.mp4"]
    assert (images / str(test_pregnancy.id) / photos[0]["filename"]).read_bytes() == b"jpeg-1"
    assert (videos / str(test_pregnancy.id) / photos[2]["filename"]).is_file()
    # Unsupported video types are skipped
    assert not any(p["original_filename"] == "clip.avi" for p in photos)


@pytest.mark.asyncio
async def test_non_image_photos_are_skipped(authed_client: AsyncClient, test_pregnancy, media_dirs):
    images, _ = media_dirs
    response = await authed_client.post(
        "/api/updates",
        **_multipart(
            {"title": "Bump"},
            photos=[("page.html", b"<script>alert(1)</script>"), ("noext", b"?"), ("bump.png", b"png")],
        ),
    )
    assert response.status_code == 201
    photos = response.json()["photos"]
    assert [p["original_filename"] for p in photos] == ["bump.png"]
    assert photos[0]["sort_order"] == 0

    stored = sorted(p.name for p in (images / str(test_pregnancy.id)).iterdir())
    assert stored == [photos[0]["filename"]]
    assert not any(name.endswith(".html") for name in stored)


@pytest.mark.asyncio
async def test_create_update_with_plain_json(authed_client: AsyncClient, test_pregnancy):
    response = await authed_client.post("/api/updates", json={"title": "Feeling good"})
    assert response.status_code == 201
    assert response.json()["update_type"] == "general"
    assert response.json()["photos"] == []


@pytest.mark.asyncio
async def test_create_update_validation(authed_client: AsyncClient, test_pregnancy):
    missing_title = await authed_client.post("/api/updates", **_multipart({"title": "  "}))
    assert missing_title.status_code == 400
    assert missing_title.json()["detail"] == "Title is required"

    bad_json = await authed_client.post("/api/updates", files={"data": (None, "{not json")})
    assert bad_json.status_code == 400
    assert bad_json.json()["detail"] == "Invalid request data"

    bad_date = await authed_client.post(
        "/api/updates", **_multipart({"title": "x", "date": "yesterday"})
    )
    assert bad_date.status_code == 400
    assert bad_date.json()["detail"] == "Invalid date format"

    bad_type = await authed_client.post(
        "/api/updates", **_multipart({"title": "x", "update_type": "gossip"})
    )
    assert bad_type.status_code == 400


@pytest.mark.asyncio
async def test_update_week_uses_conception_date(authed_client: AsyncClient, test_pregnancy, db):
    from datetime import date

    test_pregnancy.conception_date = date(2026, 1, 1)
    db.commit()

    response = await authed_client.post(
        "/api/updates",
        json={"title": "Week tag", "date": "2026-01-08T10:00:00Z"},
    )
    assert response.json()["week_number"] == 4

    no_conception = test_pregnancy
    no_conception.conception_date = None
    db.commit()
    untagged = await authed_client.post("/api/updates", json={"title": "No tag"})
    assert untagged.json()["week_number"] is None


@pytest.mark.asyncio
async def test_list_updates_newest_first_and_villager_view(authed_client: AsyncClient, test_pregnancy):
    await authed_client.post("/api/updates", json={"title": "Old", "date": "2026-01-01T00:00:00Z"})
    await authed_client.post(
        "/api/updates", json={"title": "Shared", "date": "2026-02-01T00:00:00Z", "is_shared": True}
    )
    await authed_client.post("/api/updates", json={"title": "Newest", "date": "2026-03-01T00:00:00Z"})

    everything = await authed_client.get("/api/updates")
    assert [u["title"] for u in everything.json()] == ["Newest", "Shared", "Old"]

    villager = await authed_client.get("/api/updates", params={"view": "villager"})
    assert [u["title"] for u in villager.json()] == ["Shared"]


@pytest.mark.asyncio
async def test_shared_update_queues_notifications_and_event(authed_client: AsyncClient, test_pregnancy, db):
    await _add_member(authed_client, "pat@example.com")
    await _add_member(authed_client, "lee@example.com")

    response = await authed_client.post(
        "/api/updates", json={"title": "Big news", "content": "It's a girl", "is_shared": True}
    )
    assert response.status_code == 201
    assert response.json()["shared_at"]

    notifications = db.query(EmailNotification).filter(EmailNotification.update_id == response.json()["id"]).all()
    assert sorted(n.to_email for n in notifications) == ["lee@example.com", "pat@example.com"]
    assert all(n.delivery_status == "pending" and n.job_id for n in notifications)
    assert db.query(Job).count() == 2

    events = (
        db.query(PregnancyEvent)
        .filter(PregnancyEvent.pregnancy_id == test_pregnancy.id, PregnancyEvent.event_type == "update_posted")
        .all()
    )
    assert len(events) == 1
    assert events[0].title == "Jane Doe shared an update"


@pytest.mark.asyncio
async def test_unsubscribed_members_are_not_emailed(authed_client: AsyncClient, test_pregnancy, db):
    from fortyweeks.db.models import VillageMember

    member = await _add_member(authed_client)
    row = db.get(VillageMember, member["id"])
    row.is_subscribed = False
    db.commit()

    await authed_client.post("/api/updates", json={"title": "Hello", "is_shared": True})
    assert db.query(EmailNotification).count() == 0


@pytest.mark.asyncio
async def test_share_toggle_only_notifies_on_first_share(authed_client: AsyncClient, test_pregnancy, db):
    await _add_member(authed_client)
    created = await authed_client.post("/api/updates", json={"title": "Private"})
    update_id = created.json()["id"]
    assert db.query(EmailNotification).count() == 0

    shared = await authed_client.put(f"/api/updates/{update_id}/share", json={"is_shared": True})
    assert shared.json() == {"success": True, "is_shared": True}
    assert db.query(EmailNotification).count() == 1

    # Already shared: no new emails
    await authed_client.put(f"/api/updates/{update_id}/share", json={"is_shared": True})
    assert db.query(EmailNotification).count() == 1

    unshared = await authed_client.put(f"/api/updates/{update_id}/share", json={"is_shared": False})
    assert unshared.json()["is_shared"] is False
    listed = await authed_client.get("/api/updates")
    assert listed.json()[0]["shared_at"] is None


@pytest.mark.asyncio
async def test_edit_update_json_and_multipart(authed_client: AsyncClient, test_pregnancy, db):
    await _add_member(authed_client)
    created = await authed_client.post(
        "/api/updates", **_multipart({"title": "Draft"}, photos=[("a.jpg", b"a")])
    )
    update_id = created.json()["id"]

    edited = await authed_client.put(
        f"/api/updates/{update_id}",
        json={"title": "Final", "content": "Now with words", "update_type": "milestone"},
    )
    assert edited.status_code == 200
    assert edited.json()["title"] == "Final"
    assert edited.json()["update_type"] == "milestone"

    with_media = await authed_client.put(
        f"/api/updates/{update_id}",
        **_multipart({"title": "Final", "is_shared": True}, photos=[("b.jpg", b"b")]),
    )
    assert with_media.status_code == 200
    photos = with_media.json()["photos"]
    assert [p["sort_order"] for p in photos] == [0, 1]
    assert with_media.json()["is_shared"] is True
    # Edit flipped it to shared, so the village is emailed
    assert db.query(EmailNotification).count() == 1


@pytest.mark.asyncio
async def test_updates_of_other_users_are_hidden(authed_client: AsyncClient, test_pregnancy, user_factory):
    created = await authed_client.post("/api/updates", json={"title": "Mine"})
    update_id = created.json()["id"]

    other = user_factory("Other", "other@example.com")
    response = await authed_client.put(
        f"/api/updates/{update_id}", json={"title": "Hijack"}, headers=other.headers
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Update not found or access denied"

    toggle = await authed_client.put(
        f"/api/updates/{update_id}/share", json={"is_shared": True}, headers=other.headers
    )
    assert toggle.status_code == 404


@pytest.mark.asyncio
async def test_upload_over_limit_is_rejected(authed_client: AsyncClient, test_pregnancy, monkeypatch):
    from fortyweeks.core.config import settings

    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 1024)
    response = await authed_client.post(
        "/api/updates",
        **_multipart({"title": "Huge"}, photos=[("big.jpg", b"x" * (200 * 1024))]),
    )
    assert response.status_code == 400
    assert response.json()["detail"].startswith("File size exceeds")
