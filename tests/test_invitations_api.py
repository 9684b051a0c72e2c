"""
End-to-end membership scenario over the HTTP API.
"""

from datetime import timedelta

from app.models import UnitMember, Task
from app.utils.date_helpers import DateHelpers
from tests.conftest import auth_headers_for


def test_invite_accept_assign_remove(client, db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    as_alice = auth_headers_for(alice)
    as_bob = auth_headers_for(bob)

    unit_id = client.post("/api/units", json={"name": "Flat 4B"}, headers=as_alice).json()["data"]["id"]
    invited = client.post(
        f"/api/units/{unit_id}/members",
        json={"email": "bob@example.com", "role": "member"},
        headers=as_alice,
    ).json()["data"]
    assert invited["status"] == "pending"

    invitations = client.get("/api/invitations", headers=as_bob).json()["data"]
    assert [i["id"] for i in invitations] == [invited["id"]]
    assert invitations[0]["unit"]["name"] == "Flat 4B"
    assert invitations[0]["invited_by"]["username"] == "alice"

    accepted = client.put(
        f"/api/invitations/{invited['id']}", json={"accept": True}, headers=as_bob
    )
    assert accepted.status_code == 200
    assert accepted.json()["data"]["status"] == "active"
    assert client.get("/api/invitations", headers=as_bob).json()["data"] == []

    task = client.post(
        "/api/tasks",
        json={"unit_id": unit_id, "title": "Dishes", "assignee_id": bob.id},
        headers=as_alice,
    ).json()["data"]
    assert task["assignee_id"] == bob.id

    removed = client.delete(
        f"/api/units/{unit_id}/members/{invited['id']}", headers=as_alice
    )
    assert removed.status_code == 200

    db_session.expire_all()
    assert db_session.get(Task, task["id"]).assignee_id is None
    assert db_session.get(UnitMember, invited["id"]) is None


def test_reject_invitation(client, db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    unit_id = client.post(
        "/api/units", json={"name": "Flat 4B"}, headers=auth_headers_for(alice)
    ).json()["data"]["id"]
    invited = client.post(
        f"/api/units/{unit_id}/members",
        json={"email": "bob@example.com"},
        headers=auth_headers_for(alice),
    ).json()["data"]

    response = client.put(
        f"/api/invitations/{invited['id']}",
        json={"accept": False},
        headers=auth_headers_for(bob),
    )

    assert response.status_code == 200
    assert "data" not in response.json()
    assert db_session.query(UnitMember).filter_by(user_id=bob.id).count() == 0


def test_expired_invitation_is_rejected(client, db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    unit_id = client.post(
        "/api/units", json={"name": "Flat 4B"}, headers=auth_headers_for(alice)
    ).json()["data"]["id"]
    invited = client.post(
        f"/api/units/{unit_id}/members",
        json={"email": "bob@example.com"},
        headers=auth_headers_for(alice),
    ).json()["data"]

    row = db_session.get(UnitMember, invited["id"])
    row.invite_expires_at = DateHelpers.utc_now() - timedelta(hours=1)
    db_session.commit()

    response = client.put(
        f"/api/invitations/{invited['id']}",
        json={"accept": True},
        headers=auth_headers_for(bob),
    )

    assert response.status_code == 400
    assert client.get("/api/invitations", headers=auth_headers_for(bob)).json()["data"] == []


def test_respond_to_unknown_invitation(client, make_user):
    bob = make_user("bob")
    response = client.put(
        "/api/invitations/999", json={"accept": True}, headers=auth_headers_for(bob)
    )
    assert response.status_code == 404
