from __future__ import annotations

import uuid

import pytest
from fastapi.testclient import TestClient

from tests.helpers import auth


def _user_id(client: TestClient, username: str) -> str:
    return client.get("/v1/me", headers=auth(username)).json()["data"]["user"]["id"]


def test_get_user_profile(client: TestClient):
    alice_id = _user_id(client, "alice")

    resp = client.get(f"/v1/users/{alice_id}", headers=auth("bob"))
    assert resp.status_code == 200
    profile = resp.json()["data"]["user"]
    assert profile["username"] == "alice"
    assert profile["bio"] is None
    assert profile["created_at"].endswith("Z") or profile["created_at"].endswith("+00:00")

    assert client.get(f"/v1/users/{alice_id}").status_code == 401

    missing = client.get(f"/v1/users/{uuid.uuid4()}", headers=auth("bob"))
    assert missing.status_code == 404
    assert missing.json()["code"] == "USER_NOT_FOUND"


def test_update_own_profile(client: TestClient):
    alice_id = _user_id(client, "alice")

    resp = client.put(
        f"/v1/users/{alice_id}",
        json={"displayName": "Alice A.", "bio": "Likes vinyl", "avatar_url": "https://cdn.example.com/a.png"},
        headers=auth("alice"),
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["message"] == "Profile updated successfully"
    profile = resp.json()["data"]["user"]
    assert profile["display_name"] == "Alice A."
    assert profile["bio"] == "Likes vinyl"
    assert profile["avatar_url"] == "https://cdn.example.com/a.png"

    # Unset fields stay as they were
    resp = client.put(f"/v1/users/{alice_id}", json={"bio": "Likes jazz"}, headers=auth("alice"))
    assert resp.json()["data"]["user"]["display_name"] == "Alice A."


def test_cannot_update_someone_else(client: TestClient):
    alice_id = _user_id(client, "alice")
    resp = client.put(f"/v1/users/{alice_id}", json={"bio": "hijacked"}, headers=auth("mallory"))
    assert resp.status_code == 403
    assert resp.json()["code"] == "NOT_PROFILE_OWNER"


@pytest.mark.parametrize("username", ["ab", "has space", "admin", "x" * 31])
def test_username_rules_on_update(client: TestClient, username):
    alice_id = _user_id(client, "alice")
    resp = client.put(f"/v1/users/{alice_id}", json={"username": username}, headers=auth("alice"))
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_USERNAME"


def test_username_change_and_conflict(client: TestClient):
    alice_id = _user_id(client, "alice")
    _user_id(client, "bob_1")

    taken = client.put(f"/v1/users/{alice_id}", json={"username": "bob_1"}, headers=auth("alice"))
    assert taken.status_code == 409
    assert taken.json()["code"] == "USERNAME_TAKEN"

    resp = client.put(f"/v1/users/{alice_id}", json={"username": "alice_2"}, headers=auth("alice"))
    assert resp.json()["data"]["user"]["username"] == "alice_2"


def test_check_username(client: TestClient):
    _user_id(client, "party_animal")

    free = client.get("/v1/users/check-username/night_owl").json()["data"]
    assert free == {"available": True, "valid": True}

    taken = client.get("/v1/users/check-username/party_animal").json()["data"]
    assert taken["available"] is False
    assert taken["valid"] is True
    assert taken["suggestion"].startswith("party_animal")

    bad = client.get("/v1/users/check-username/no").json()["data"]
    assert bad == {
        "available": False,
        "valid": False,
        "error": "username must be at least 3 characters",
    }
