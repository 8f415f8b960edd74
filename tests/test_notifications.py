from __future__ import annotations

import dataclasses
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from partyhub.core.config import settings
from partyhub.models import Notification, Party
from partyhub.models.notification import NotificationKind
from partyhub.services import notifications
from partyhub.worker.tasks import notify_party_event, render_notification
from tests.helpers import auth


class FakeCelery:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[dict] = []

    def send_task(self, name, kwargs=None, **options):
        if self.fail:
            raise ConnectionError("broker unreachable")
        self.sent.append({"name": name, **(kwargs or {})})


@pytest.fixture
def broker(monkeypatch):
    fake = FakeCelery()
    monkeypatch.setattr(
        notifications, "settings", dataclasses.replace(settings, notifications_enabled=True)
    )
    monkeypatch.setattr(notifications, "celery_app", fake)
    return fake


def _user_id(client: TestClient, username: str) -> str:
    return client.get("/v1/me", headers=auth(username)).json()["data"]["user"]["id"]


def test_join_and_leave_notify_host(client: TestClient, create_party, broker):
    party_id = create_party("host")["id"]
    host_id = _user_id(client, "host")

    client.post(f"/v1/parties/{party_id}/join", headers=auth("guest"))
    client.post(f"/v1/parties/{party_id}/leave", headers=auth("guest"))

    assert [m["kind"] for m in broker.sent] == ["PARTY_JOINED", "PARTY_LEFT"]
    assert all(m["name"] == "notify_party_event" for m in broker.sent)
    assert all(m["recipient_ids"] == [host_id] for m in broker.sent)
    assert broker.sent[0]["party_id"] == party_id


def test_status_change_and_delete_notify_guests(client: TestClient, create_party, broker):
    party_id = create_party("host")["id"]
    client.post(f"/v1/parties/{party_id}/join", headers=auth("guest"))
    guest_id = _user_id(client, "guest")
    broker.sent.clear()

    client.put(f"/v1/parties/{party_id}", json={"status": "LIVE"}, headers=auth("host"))
    client.put(f"/v1/parties/{party_id}", json={"title": "Just a rename"}, headers=auth("host"))
    client.delete(f"/v1/parties/{party_id}", headers=auth("host"))

    assert [m["kind"] for m in broker.sent] == ["PARTY_STARTED", "PARTY_DELETED"]
    assert all(m["recipient_ids"] == [guest_id] for m in broker.sent)


def test_no_dispatch_without_recipients(client: TestClient, create_party, broker):
    party_id = create_party("host")["id"]
    client.put(f"/v1/parties/{party_id}", json={"status": "CANCELLED"}, headers=auth("host"))
    assert broker.sent == []


def test_dispatch_excludes_actor(broker):
    actor, other = uuid.uuid4(), uuid.uuid4()
    assert notifications.dispatch(
        NotificationKind.PARTY_LEFT, uuid.uuid4(), "Party", actor, [actor]
    ) is False
    assert broker.sent == []

    assert notifications.dispatch(
        NotificationKind.PARTY_LEFT, uuid.uuid4(), "Party", actor, [actor, other]
    ) is True
    assert broker.sent[0]["recipient_ids"] == [str(other)]
    assert broker.sent[0]["actor_id"] == str(actor)


def test_broker_failure_does_not_undo_join(client: TestClient, create_party, db_session, monkeypatch):
    monkeypatch.setattr(
        notifications, "settings", dataclasses.replace(settings, notifications_enabled=True)
    )
    monkeypatch.setattr(notifications, "celery_app", FakeCelery(fail=True))

    party_id = create_party("host")["id"]
    resp = client.post(f"/v1/parties/{party_id}/join", headers=auth("guest"))
    assert resp.status_code == 200

    party = db_session.get(Party, uuid.UUID(party_id))
    assert party.attendees_count == 2


def test_worker_task_records_notifications(client: TestClient, create_party, db_session):
    party_id = create_party("host", title="Game Night")["id"]
    guest_id = _user_id(client, "guest")

    written = notify_party_event(
        kind="PARTY_CANCELLED",
        party_id=party_id,
        party_title="Game Night",
        actor_id=None,
        recipient_ids=[guest_id],
    )
    assert written == 1

    rows = db_session.scalars(
        select(Notification).where(Notification.user_id == uuid.UUID(guest_id))
    ).all()
    assert len(rows) == 1
    assert rows[0].kind == "PARTY_CANCELLED"
    assert rows[0].body == "Game Night was cancelled."
    assert rows[0].data["party_id"] == party_id

    resp = client.get("/v1/me/notifications", headers=auth("guest"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"]["total"] == 1
    assert body["data"][0]["title"] == "Party cancelled"
    assert body["data"][0]["read"] is False


def test_render_notification_covers_every_kind():
    for kind in NotificationKind:
        title, body = render_notification(kind, "Luau")
        assert title
        assert "Luau" in body
