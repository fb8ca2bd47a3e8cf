"""
tests/test_api_routes.py — FastAPI Route Integration Tests
============================================================
Drives the HTTP surface with the FastAPI TestClient against the
in-memory database.

These tests verify:
- Health endpoint availability
- Bearer-token handling (missing / malformed / invalid → 401)
- Domain errors mapped onto 400 / 403 / 404 JSON responses
- A full group → message → reaction → settlement flow over HTTP
"""

from __future__ import annotations

import pytest

from conftest import make_token
from hangout.constants import TROPHY_EMOJI


def _auth(sub: str) -> dict:
    return {"Authorization": f"Bearer {make_token(sub)}"}


@pytest.fixture
def crew(client, users):
    """A group owned by alice with bob as a member; returns (group, hangout channel)."""
    group = client.post("/api/groups", json={"name": "Crew"}, headers=_auth("alice")).json()
    client.post(
        "/api/groups/join", json={"invite_code": group["invite_code"]}, headers=_auth("bob")
    )
    channels = client.get(f"/api/groups/{group['id']}/channels", headers=_auth("alice")).json()
    return group, channels["channels"][0]


# ===========================================================================
# Health endpoint
# ===========================================================================
class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


# ===========================================================================
# Authentication
# ===========================================================================
class TestAuthentication:
    def test_no_token(self, client, users):
        resp = client.get("/api/groups")
        assert resp.status_code == 401
        assert resp.json() == {"detail": "Not authenticated"}

    def test_malformed_header(self, client, users):
        resp = client.get("/api/groups", headers={"Authorization": "Token abc"})
        assert resp.status_code == 401

    def test_invalid_token(self, client, users):
        resp = client.get("/api/groups", headers={"Authorization": "Bearer not.a.jwt"})
        assert resp.status_code == 401

    def test_profile_upsert_registers_new_subject(self, client):
        resp = client.put(
            "/api/users/me",
            json={"name": "Zed", "username": "zed"},
            headers=_auth("zed-subject"),
        )
        assert resp.status_code == 200
        assert resp.json()["username"] == "zed"

        me = client.get("/api/users/me", headers=_auth("zed-subject"))
        assert me.json()["id"] == resp.json()["id"]

    def test_unregistered_subject_is_404(self, client):
        assert client.get("/api/users/me", headers=_auth("ghost")).status_code == 404


# ===========================================================================
# Error mapping
# ===========================================================================
class TestErrorMapping:
    def test_validation_is_400(self, client, users):
        resp = client.post("/api/groups", json={"name": "   "}, headers=_auth("alice"))
        assert resp.status_code == 400
        assert "empty" in resp.json()["detail"]

    def test_non_member_is_403(self, client, crew):
        group, _ = crew
        resp = client.get(f"/api/groups/{group['id']}", headers=_auth("carol"))
        assert resp.status_code == 403

    def test_missing_group_is_404(self, client, users):
        assert client.get("/api/groups/999", headers=_auth("alice")).status_code == 404

    def test_owner_cannot_leave(self, client, crew):
        group, _ = crew
        resp = client.post(f"/api/groups/{group['id']}/leave", headers=_auth("alice"))
        assert resp.status_code == 403


# ===========================================================================
# End-to-end flows
# ===========================================================================
class TestGroupFlow:
    def test_group_detail_lists_members(self, client, users, crew):
        group, channel = crew
        assert channel["type"] == "hangout"

        detail = client.get(f"/api/groups/{group['id']}", headers=_auth("bob")).json()
        roles = {m["user_id"]: m["role"] for m in detail["members"]}
        assert roles == {users["alice"]: "owner", users["bob"]: "member"}

    def test_role_change_and_removal(self, client, users, crew):
        group, _ = crew
        resp = client.put(
            f"/api/groups/{group['id']}/members/{users['bob']}/role",
            json={"role": "admin"},
            headers=_auth("alice"),
        )
        assert resp.json() == {"user_id": users["bob"], "role": "admin"}

        resp = client.delete(
            f"/api/groups/{group['id']}/members/{users['alice']}", headers=_auth("bob")
        )
        assert resp.status_code == 403

    def test_trophies_enshrine_over_http(self, client, users, crew):
        group, channel = crew
        client.put(
            f"/api/groups/{group['id']}/hall-of-fame/threshold",
            json={"threshold": 2},
            headers=_auth("alice"),
        )
        message = client.post(
            f"/api/channels/{channel['id']}/messages",
            json={"body": "hot take"},
            headers=_auth("bob"),
        ).json()

        for sub in ("alice", "bob"):
            resp = client.post(
                f"/api/messages/{message['id']}/reactions",
                json={"emoji": TROPHY_EMOJI},
                headers=_auth(sub),
            )
            assert resp.json() == {"added": True}

        hof = client.get(
            f"/api/groups/{group['id']}/hall-of-fame", headers=_auth("alice")
        ).json()
        assert [e["message_id"] for e in hof["entries"]] == [message["id"]]

        notes = client.get("/api/notifications", headers=_auth("bob")).json()
        assert [n["type"] for n in notes["notifications"]] == ["hall_of_fame"]

    def test_deleted_message_body_is_hidden(self, client, crew):
        _, channel = crew
        message = client.post(
            f"/api/channels/{channel['id']}/messages",
            json={"body": "oops"},
            headers=_auth("bob"),
        ).json()
        assert client.delete(
            f"/api/messages/{message['id']}", headers=_auth("bob")
        ).status_code == 204

        listed = client.get(
            f"/api/channels/{channel['id']}/messages", headers=_auth("alice")
        ).json()["messages"]
        assert listed[0]["is_deleted"] is True
        assert listed[0]["body"] == ""

    def test_settlement_over_http(self, client, users, crew):
        group, _ = crew
        event = client.post(
            f"/api/groups/{group['id']}/channels",
            json={"name": "Dinner", "type": "event"},
            headers=_auth("alice"),
        ).json()
        split = client.post(
            f"/api/channels/{event['id']}/splits",
            json={"name": "Sushi", "total_amount": 3000},
            headers=_auth("alice"),
        ).json()
        item = client.post(
            f"/api/splits/{split['id']}/items",
            json={"name": "Omakase", "price": 3000},
            headers=_auth("alice"),
        ).json()
        client.post(f"/api/split-items/{item['id']}/claim", headers=_auth("bob"))

        balances = client.post(
            f"/api/channels/{event['id']}/settlement", headers=_auth("bob")
        ).json()["balances"]
        assert [(b["from_user_id"], b["to_user_id"], b["amount"]) for b in balances] == [
            (users["bob"], users["alice"], 3000)
        ]
