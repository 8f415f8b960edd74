from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from partyhub.api.v1.schemas.parties import PartyCreate
from partyhub.models.party import PartyStatus
from partyhub.services import parties_service
from partyhub.services.exceptions import ValidationError
from partyhub.services.party_queries import PartyFilters, list_parties
from tests.helpers import auth, future, past


def _titles(resp) -> list[str]:
    return [p["title"] for p in resp.json()["data"]]


def test_upcoming_excludes_ended_party_in_future(client: TestClient, create_party):
    ended = create_party("host", title="Finished Early", starts_at=future(days=3))
    create_party("host", title="Still On", starts_at=future(days=2))

    for status in ("LIVE", "ENDED"):
        resp = client.put(
            f"/v1/parties/{ended['id']}", json={"status": status}, headers=auth("host")
        )
        assert resp.status_code == 200

    resp = client.get("/v1/parties", params={"upcoming": "true"})
    assert _titles(resp) == ["Still On"]

    # Without the shorthand the ended party is listed again
    assert set(_titles(client.get("/v1/parties"))) == {"Finished Early", "Still On"}


def test_upcoming_excludes_past_and_cancelled(client: TestClient, create_party):
    create_party("host", title="Yesterday", starts_at=past())
    cancelled = create_party("host", title="Called Off", starts_at=future())
    create_party("host", title="Tomorrow", starts_at=future())
    client.put(f"/v1/parties/{cancelled['id']}", json={"status": "CANCELLED"}, headers=auth("host"))

    assert _titles(client.get("/v1/parties?upcoming=true")) == ["Tomorrow"]


def test_listing_never_shows_private_parties(client: TestClient, create_party):
    create_party("host", title="Open House")
    create_party("host", title="Invite Only", is_private=True)

    assert _titles(client.get("/v1/parties")) == ["Open House"]

    host_id = client.get("/v1/me", headers=auth("host")).json()["data"]["user"]["id"]
    resp = client.get("/v1/parties", params={"host_id": host_id}, headers=auth("host"))
    assert _titles(resp) == ["Open House"]


def test_filters_by_status_and_host(client: TestClient, create_party):
    live = create_party("alice", title="Alice Live")
    create_party("alice", title="Alice Planned")
    create_party("bob", title="Bob Planned")
    client.put(f"/v1/parties/{live['id']}", json={"status": "LIVE"}, headers=auth("alice"))

    assert _titles(client.get("/v1/parties?status=LIVE")) == ["Alice Live"]

    alice_id = live["host"]["id"]
    assert set(_titles(client.get(f"/v1/parties?host_id={alice_id}"))) == {
        "Alice Live",
        "Alice Planned",
    }
    assert _titles(client.get(f"/v1/parties?host_id={alice_id}&status=PLANNED")) == [
        "Alice Planned"
    ]


def test_search_matches_title_and_description_case_insensitively(client: TestClient, create_party):
    create_party("host", title="Jazz Night")
    create_party("host", title="Quiet Evening", description="Smooth JAZZ on vinyl")
    create_party("host", title="Techno Rave")

    assert set(_titles(client.get("/v1/parties?search=jazz"))) == {"Jazz Night", "Quiet Evening"}
    assert _titles(client.get("/v1/parties?search=%25")) == []


def test_ordered_by_start_time_with_page_meta(client: TestClient, create_party):
    create_party("host", title="Third", starts_at=future(days=3))
    create_party("host", title="First", starts_at=future(days=1))
    create_party("host", title="Second", starts_at=future(days=2))

    resp = client.get("/v1/parties?limit=2")
    assert _titles(resp) == ["First", "Second"]
    assert resp.json()["meta"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}

    resp = client.get("/v1/parties?limit=2&page=2")
    assert _titles(resp) == ["Third"]


@pytest.mark.parametrize("query", ["limit=0", "limit=101", "page=0"])
def test_invalid_pagination(client: TestClient, query):
    resp = client.get(f"/v1/parties?{query}")
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_PAGINATION"


def test_invalid_status_filter(client: TestClient):
    resp = client.get("/v1/parties?status=PARTYING")
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["path"] == "status"


def test_upcoming_intersects_with_status(db_session, make_user):
    host = make_user("host")
    now = datetime.now(timezone.utc)
    planned = parties_service.create_party(
        db_session, host, PartyCreate(title="Planned One", starts_at=now + timedelta(days=1))
    )

    items, total = list_parties(
        db_session, PartyFilters(upcoming=True, status=PartyStatus.LIVE), now=now
    )
    assert (items, total) == ([], 0)

    items, total = list_parties(
        db_session, PartyFilters(upcoming=True, status=PartyStatus.PLANNED), now=now
    )
    assert [p.id for p in items] == [planned.id]
    assert total == 1

    # Reference time after the start: no longer upcoming
    items, _ = list_parties(db_session, PartyFilters(upcoming=True), now=now + timedelta(days=2))
    assert items == []


def test_filters_validate_pagination():
    with pytest.raises(ValidationError):
        PartyFilters(page=0)
    with pytest.raises(ValidationError):
        PartyFilters(limit=500)
    assert PartyFilters(page=3, limit=10).offset == 20
