"""Tests for village members, invite links, and joining."""
import pytest
from httpx import AsyncClient

from fortyweeks.core.exceptions import InvalidInviteHash
from fortyweeks.db.models import PregnancyEvent, VillageMember
from fortyweeks.services.invite_service import decode_invite_hash, encode_invite_hash


def _events(db, pregnancy_id: int, event_type: str) -> list[PregnancyEvent]:
    return (
        db.query(PregnancyEvent)
        .filter(PregnancyEvent.pregnancy_id == pregnancy_id, PregnancyEvent.event_type == event_type)
        .order_by(PregnancyEvent.id)
        .all()
    )


# =============================================================================
# Invite hash
# =============================================================================

def test_invite_hash_is_eight_hex_chars_and_reversible():
    token = encode_invite_hash(1)
    assert token == "40202025"
    assert decode_invite_hash(token) == 1
    assert decode_invite_hash(encode_invite_hash(123456)) == 123456
    assert decode_invite_hash(token.upper()) == 1


@pytest.mark.parametrize("token", ["", "4020202", "402020250", "zzzzzzzz", "4020-025"])
def test_invite_hash_rejects_malformed(token):
    with pytest.raises(InvalidInviteHash):
        decode_invite_hash(token)


# =============================================================================
# Members
# =============================================================================

@pytest.mark.asyncio
async def test_add_member_normalizes_and_logs_event(authed_client: AsyncClient, test_pregnancy, db):
    response = await authed_client.post(
        "/api/village-members",
        json={"name": " Grandma ", "email": " Grandma@Example.COM", "relationship": "grandparent"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Grandma"
    assert data["email"] == "grandma@example.com"
    assert data["is_told"] is False
    assert data["is_subscribed"] is True
    assert "unsubscribe_token" not in data

    member = db.get(VillageMember, data["id"])
    assert member.unsubscribe_token

    events = _events(db, test_pregnancy.id, "villager_joined")
    assert len(events) == 1
    assert events[0].event_data["source"] == "manual"


@pytest.mark.asyncio
async def test_add_member_duplicate_email_conflicts(authed_client: AsyncClient, test_pregnancy):
    body = {"name": "Pat", "email": "pat@example.com", "relationship": "friend"}
    assert (await authed_client.post("/api/village-members", json=body)).status_code == 201

    body["email"] = "PAT@example.com"
    response = await authed_client.post("/api/village-members", json=body)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_add_member_requires_fields(authed_client: AsyncClient, test_pregnancy):
    response = await authed_client.post(
        "/api/village-members", json={"name": "Pat", "email": "", "relationship": "friend"}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_bulk_add_suffixes_names(authed_client: AsyncClient, test_pregnancy):
    response = await authed_client.post(
        "/api/village-members/bulk",
        json={
            "name": "The Smiths",
            "emails": ["a@example.com", "b@example.com"],
            "relationship": "aunt",
            "is_told": True,
        },
    )
    assert response.status_code == 201
    members = response.json()["members"]
    assert [m["name"] for m in members] == ["The Smiths (1)", "The Smiths (2)"]
    assert all(m["is_told"] and m["told_date"] for m in members)

    listed = await authed_client.get("/api/village-members")
    assert [m["email"] for m in listed.json()] == ["a@example.com", "b@example.com"]


@pytest.mark.asyncio
async def test_bulk_add_is_all_or_nothing(authed_client: AsyncClient, test_pregnancy, db):
    await authed_client.post(
        "/api/village-members",
        json={"name": "Pat", "email": "pat@example.com", "relationship": "friend"},
    )
    response = await authed_client.post(
        "/api/village-members/bulk",
        json={"name": "X", "emails": ["new@example.com", "pat@example.com"], "relationship": "friend"},
    )
    assert response.status_code == 409
    assert db.query(VillageMember).count() == 1


@pytest.mark.asyncio
async def test_bulk_add_rejects_repeated_email_in_request(authed_client: AsyncClient, test_pregnancy):
    response = await authed_client.post(
        "/api/village-members/bulk",
        json={"name": "X", "emails": ["dup@example.com", "DUP@example.com"], "relationship": "friend"},
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_bulk_add_rejects_empty_email(authed_client: AsyncClient, test_pregnancy):
    response = await authed_client.post(
        "/api/village-members/bulk",
        json={"name": "X", "emails": ["ok@example.com", "  "], "relationship": "friend"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Empty email not allowed"


@pytest.mark.asyncio
async def test_mark_told_emits_event_once(authed_client: AsyncClient, test_pregnancy, db):
    created = await authed_client.post(
        "/api/village-members",
        json={"name": "Pat", "email": "pat@example.com", "relationship": "friend"},
    )
    member_id = created.json()["id"]

    first = await authed_client.put(f"/api/village-members/{member_id}", json={"is_told": True})
    assert first.status_code == 200
    assert first.json()["is_told"] is True
    assert first.json()["told_date"]

    await authed_client.put(f"/api/village-members/{member_id}", json={"is_told": True})
    assert len(_events(db, test_pregnancy.id, "villager_told")) == 1

    untold = await authed_client.put(f"/api/village-members/{member_id}", json={"is_told": False})
    assert untold.json()["told_date"] is None


@pytest.mark.asyncio
async def test_stats(authed_client: AsyncClient, test_pregnancy):
    await authed_client.post(
        "/api/village-members/bulk",
        json={"name": "X", "emails": ["a@example.com", "b@example.com"], "relationship": "friend"},
    )
    await authed_client.post(
        "/api/village-members",
        json={"name": "Told", "email": "c@example.com", "relationship": "friend", "is_told": True},
    )
    response = await authed_client.get("/api/village-members/stats")
    assert response.json() == {
        "total_members": 3,
        "told_members": 1,
        "subscribed_members": 3,
        "pending_members": 2,
    }


@pytest.mark.asyncio
async def test_members_of_other_pregnancy_are_forbidden(
    authed_client: AsyncClient, test_pregnancy, user_factory
):
    created = await authed_client.post(
        "/api/village-members",
        json={"name": "Pat", "email": "pat@example.com", "relationship": "friend"},
    )
    member_id = created.json()["id"]

    other = user_factory("Other Owner", "other@example.com")
    await authed_client.post(
        "/api/pregnancy", json={"due_date": "2027-01-01"}, headers=other.headers
    )

    put = await authed_client.put(
        f"/api/village-members/{member_id}", json={"is_told": True}, headers=other.headers
    )
    assert put.status_code == 403
    assert put.json()["detail"] == "Forbidden"

    delete = await authed_client.delete(f"/api/village-members/{member_id}", headers=other.headers)
    assert delete.status_code == 403


@pytest.mark.asyncio
async def test_delete_member(authed_client: AsyncClient, test_pregnancy):
    created = await authed_client.post(
        "/api/village-members",
        json={"name": "Pat", "email": "pat@example.com", "relationship": "friend"},
    )
    member_id = created.json()["id"]

    response = await authed_client.delete(f"/api/village-members/{member_id}")
    assert response.status_code == 204

    missing = await authed_client.delete(f"/api/village-members/{member_id}")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Village member not found"


# =============================================================================
# Invite links
# =============================================================================

@pytest.mark.asyncio
async def test_invite_info_and_join(authed_client: AsyncClient, client: AsyncClient, test_pregnancy, db):
    hash_response = await authed_client.get("/api/pregnancy/invite-hash")
    invite_hash = hash_response.json()["hash"]
    assert invite_hash == encode_invite_hash(test_pregnancy.id)

    info = await client.get(f"/api/pregnancy/invite/{invite_hash}")
    assert info.status_code == 200
    assert info.json() == {
        "parent_names": "Jane Doe & Sam Smith",
        "baby_name": "Peanut",
        "due_date": test_pregnancy.due_date.isoformat(),
    }

    joined = await client.post(
        f"/api/pregnancy/join/{invite_hash}",
        json={"name": "Uncle Bob", "emails": ["bob@example.com"], "relationship": "uncle"},
    )
    assert joined.status_code == 200
    assert joined.json()["success"] is True
    assert joined.json()["members"][0]["name"] == "Uncle Bob"

    events = _events(db, test_pregnancy.id, "villager_joined")
    assert events[-1].event_data["source"] == "invite"
    assert events[-1].title == "Uncle Bob joined your village"

    again = await client.post(
        f"/api/pregnancy/join/{invite_hash}",
        json={"name": "Uncle Bob", "emails": ["bob@example.com"], "relationship": "uncle"},
    )
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_invite_for_unknown_or_inactive_pregnancy(client: AsyncClient, test_pregnancy, db):
    unknown = await client.get(f"/api/pregnancy/invite/{encode_invite_hash(9999)}")
    assert unknown.status_code == 404

    malformed = await client.get("/api/pregnancy/invite/not-hex!")
    assert malformed.status_code == 404

    test_pregnancy.is_active = False
    db.commit()
    inactive = await client.post(
        f"/api/pregnancy/join/{encode_invite_hash(test_pregnancy.id)}",
        json={"name": "Bob", "emails": ["bob@example.com"], "relationship": "uncle"},
    )
    assert inactive.status_code == 404
    assert inactive.json()["detail"] == "Invalid or expired invite"
