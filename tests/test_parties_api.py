from __future__ import annotations

import uuid

from fastapi.testclient import TestClient
from sqlalchemy import func, select

from partyhub.models import ChatRoom, Party, PartyAttendee, PartyTag
from tests.helpers import auth, future


def test_create_public_party_returns_envelope(client: TestClient, db_session):
    resp = client.post(
        "/v1/parties",
        json={
            "title": "  Summer Kickoff  ",
            "description": "Bring snacks",
            "starts_at": future(),
            "ends_at": future(days=1, hours=4),
            "venue": {"name": "Pier 9", "latitude": 37.8, "longitude": -122.4},
            "tags": ["Rooftop", "Live Music"],
        },
        headers=auth("alice"),
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Party created successfully"

    party = body["data"]["party"]
    assert party["title"] == "Summer Kickoff"
    assert party["status"] == "PLANNED"
    assert party["is_private"] is False
    assert party["access_code"] is None
    assert party["attendees_count"] == 1
    assert party["host"]["username"] == "alice"
    assert party["venue"]["name"] == "Pier 9"
    assert party["tags"] == ["Rooftop", "Live Music"]

    party_id = uuid.UUID(party["id"])
    assert db_session.scalar(
        select(func.count()).select_from(ChatRoom).where(ChatRoom.party_id == party_id)
    ) == 1


def test_private_party_scenario_code_and_capacity(client: TestClient, db_session):
    # Private party with room for the host only
    resp = client.post(
        "/v1/parties",
        json={"title": "Secret Dinner", "starts_at": future(), "is_private": True, "max_attendees": 1},
        headers=auth("host"),
    )
    assert resp.status_code == 201
    party = resp.json()["data"]["party"]
    code = party["access_code"]
    assert len(code) == 6
    assert party["attendees_count"] == 1

    party_id = uuid.UUID(party["id"])
    rows = db_session.scalars(select(PartyAttendee).where(PartyAttendee.party_id == party_id)).all()
    assert [r.role for r in rows] == ["host"]

    # Wrong code
    wrong = ("A" if code[0] != "A" else "B") + code[1:]
    resp = client.post(
        f"/v1/parties/{party_id}/join", json={"access_code": wrong}, headers=auth("bob")
    )
    assert resp.status_code == 403
    assert resp.json()["code"] == "INVALID_ACCESS_CODE"

    # Correct code, but the host already fills the only seat
    resp = client.post(
        f"/v1/parties/{party_id}/join", json={"access_code": code}, headers=auth("bob")
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "party is full", "code": "PARTY_FULL"}

    db_session.expire_all()
    assert db_session.get(Party, party_id).attendees_count == 1


def test_public_party_roster_and_duplicate_join(client: TestClient, create_party):
    party = create_party("host")
    party_id = party["id"]

    assert client.post(f"/v1/parties/{party_id}/join", headers=auth("guest1")).status_code == 200
    assert client.post(f"/v1/parties/{party_id}/join", headers=auth("guest2")).status_code == 200

    resp = client.get(f"/v1/parties/{party_id}")
    assert resp.json()["data"]["party"]["attendees_count"] == 3

    roster = client.get(f"/v1/parties/{party_id}/attendees").json()
    assert [a["username"] for a in roster["data"]] == ["host", "guest1", "guest2"]
    assert [a["role"] for a in roster["data"]] == ["host", "guest", "guest"]
    assert roster["meta"] == {"page": 1, "limit": 20, "total": 3, "totalPages": 1}

    resp = client.post(f"/v1/parties/{party_id}/join", headers=auth("guest1"))
    assert resp.status_code == 409
    assert resp.json()["code"] == "ALREADY_ATTENDING"

    resp = client.get(f"/v1/parties/{party_id}")
    assert resp.json()["data"]["party"]["attendees_count"] == 3


def test_attendee_roster_pagination(client: TestClient, create_party):
    party_id = create_party("host")["id"]
    for name in ("g1", "g2", "g3", "g4"):
        client.post(f"/v1/parties/{party_id}/join", headers=auth(name))

    body = client.get(f"/v1/parties/{party_id}/attendees?page=2&limit=2").json()
    assert [a["username"] for a in body["data"]] == ["g2", "g3"]
    assert body["meta"] == {"page": 2, "limit": 2, "total": 5, "totalPages": 3}


def test_private_party_visibility(client: TestClient, create_party):
    created = client.post(
        "/v1/parties",
        json={"title": "Members Only", "starts_at": future(), "is_private": True},
        headers=auth("host"),
    ).json()["data"]["party"]
    party_id, code = created["id"], created["access_code"]

    anon = client.get(f"/v1/parties/{party_id}")
    assert anon.status_code == 403
    assert anon.json()["message"] == "access denied to private party"

    assert client.get(f"/v1/parties/{party_id}", headers=auth("stranger")).status_code == 403
    assert client.get(f"/v1/parties/{party_id}/attendees").status_code == 403

    host_view = client.get(f"/v1/parties/{party_id}", headers=auth("host"))
    assert host_view.status_code == 200
    assert host_view.json()["data"]["party"]["access_code"] == code

    client.post(f"/v1/parties/{party_id}/join", json={"access_code": code}, headers=auth("friend"))
    assert client.get(f"/v1/parties/{party_id}", headers=auth("friend")).status_code == 200
    assert client.get(f"/v1/parties/{party_id}/attendees", headers=auth("friend")).status_code == 200


def test_missing_party_is_404(client: TestClient):
    missing = uuid.uuid4()
    for resp in (
        client.get(f"/v1/parties/{missing}"),
        client.get(f"/v1/parties/{missing}/attendees"),
        client.post(f"/v1/parties/{missing}/join", headers=auth("bob")),
        client.post(f"/v1/parties/{missing}/leave", headers=auth("bob")),
        client.delete(f"/v1/parties/{missing}", headers=auth("bob")),
    ):
        assert resp.status_code == 404
        assert resp.json()["code"] == "PARTY_NOT_FOUND"


def test_update_and_delete_are_host_only(client: TestClient, create_party):
    party_id = create_party("host")["id"]

    resp = client.put(f"/v1/parties/{party_id}", json={"title": "Hijacked"}, headers=auth("mallory"))
    assert resp.status_code == 403
    assert resp.json()["code"] == "NOT_PARTY_HOST"

    resp = client.delete(f"/v1/parties/{party_id}", headers=auth("mallory"))
    assert resp.status_code == 403

    resp = client.put(f"/v1/parties/{party_id}", json={"title": "Renamed"}, headers=auth("host"))
    assert resp.status_code == 200
    assert resp.json()["message"] == "Party updated successfully"
    assert resp.json()["data"]["party"]["title"] == "Renamed"


def test_delete_cascades_roster_and_tags(client: TestClient, create_party, db_session):
    party_id = create_party("host", tags=["karaoke"])["id"]
    client.post(f"/v1/parties/{party_id}/join", headers=auth("guest"))

    resp = client.delete(f"/v1/parties/{party_id}", headers=auth("host"))
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "data": None,
        "message": "Party deleted successfully",
    }

    pid = uuid.UUID(party_id)
    assert db_session.get(Party, pid) is None
    assert db_session.scalar(
        select(func.count()).select_from(PartyAttendee).where(PartyAttendee.party_id == pid)
    ) == 0
    assert db_session.scalar(
        select(func.count()).select_from(PartyTag).where(PartyTag.party_id == pid)
    ) == 0
    assert db_session.scalar(
        select(func.count()).select_from(ChatRoom).where(ChatRoom.party_id == pid)
    ) == 0
    assert client.get(f"/v1/parties/{party_id}").status_code == 404


def test_validation_errors_use_error_envelope(client: TestClient):
    resp = client.post(
        "/v1/parties",
        json={"title": "ab", "starts_at": future(), "max_attendees": 0},
        headers=auth("host"),
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_FAILED"
    paths = {err["path"] for err in body["errors"]}
    assert {"title", "max_attendees"} <= paths


def test_create_rejects_bad_dates_and_tags(client: TestClient):
    resp = client.post(
        "/v1/parties",
        json={"title": "Backwards", "starts_at": future(days=2), "ends_at": future(days=1)},
        headers=auth("host"),
    )
    assert resp.status_code == 400

    resp = client.post(
        "/v1/parties",
        json={"title": "Naive time", "starts_at": "2030-01-01T20:00:00"},
        headers=auth("host"),
    )
    assert resp.status_code == 400

    resp = client.post(
        "/v1/parties",
        json={"title": "Tagged", "starts_at": future(), "tags": [f"t{i}" for i in range(11)]},
        headers=auth("host"),
    )
    assert resp.status_code == 400


def test_write_endpoints_require_auth(client: TestClient, create_party):
    party_id = create_party("host")["id"]

    resp = client.post("/v1/parties", json={"title": "No auth", "starts_at": future()})
    assert resp.status_code == 401
    assert resp.json()["success"] is False
    assert resp.json()["code"] == "UNAUTHENTICATED"

    assert client.post(f"/v1/parties/{party_id}/join").status_code == 401
    assert client.post(f"/v1/parties/{party_id}/leave").status_code == 401
    assert client.put(f"/v1/parties/{party_id}", json={}).status_code == 401
    assert client.delete(f"/v1/parties/{party_id}").status_code == 401
    assert client.post("/v1/parties/join-by-code", json={"access_code": "ABC123"}).status_code == 401


def test_request_id_header_is_echoed(client: TestClient):
    resp = client.get("/v1/parties", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"
