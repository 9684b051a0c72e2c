"""
API tests for units and their members.
"""

import pytest

from app.models import UnitMember
from app.models.enums import UnitRole, MemberStatus
from tests.conftest import auth_headers_for


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def unit_id(client, alice):
    response = client.post(
        "/api/units", json={"name": "Flat 4B"}, headers=auth_headers_for(alice)
    )
    assert response.status_code == 201
    return response.json()["data"]["id"]


class TestUnits:
    def test_create_and_list(self, client, alice, unit_id):
        response = client.get("/api/units", headers=auth_headers_for(alice))

        assert response.status_code == 200
        units = response.json()["data"]
        assert len(units) == 1
        assert units[0]["id"] == unit_id
        assert units[0]["role"] == "admin"
        assert units[0]["member_count"] == 1
        assert units[0]["task_count"] == 0

    def test_empty_name_is_rejected(self, client, alice):
        response = client.post(
            "/api/units", json={"name": ""}, headers=auth_headers_for(alice)
        )
        assert response.status_code == 400

    def test_details_include_members_and_recent_tasks(
        self, client, alice, unit_id, make_task
    ):
        for i in range(7):
            make_task(unit_id, alice, title=f"Chore {i}")

        response = client.get(f"/api/units/{unit_id}", headers=auth_headers_for(alice))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Flat 4B"
        assert [m["user"]["username"] for m in data["members"]] == ["alice"]
        assert len(data["recent_tasks"]) == 5
        assert data["recent_tasks"][0]["title"] == "Chore 6"

    def test_outsider_gets_403(self, client, bob, unit_id):
        response = client.get(f"/api/units/{unit_id}", headers=auth_headers_for(bob))
        assert response.status_code == 403

    def test_missing_unit_gets_404(self, client, alice):
        response = client.get("/api/units/999", headers=auth_headers_for(alice))
        assert response.status_code == 404

    def test_only_admin_updates(self, client, alice, bob, unit_id, add_member):
        add_member(unit_id, bob)

        forbidden = client.put(
            f"/api/units/{unit_id}", json={"name": "Bob's"}, headers=auth_headers_for(bob)
        )
        allowed = client.put(
            f"/api/units/{unit_id}", json={"name": "Flat 5"}, headers=auth_headers_for(alice)
        )

        assert forbidden.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()["data"]["name"] == "Flat 5"

    def test_delete_unit_cascades(
        self, client, db_session, alice, bob, unit_id, add_member, make_task
    ):
        add_member(unit_id, bob)
        make_task(unit_id, alice, assignee=bob)

        response = client.delete(f"/api/units/{unit_id}", headers=auth_headers_for(alice))

        assert response.status_code == 200
        assert db_session.query(UnitMember).count() == 0
        assert client.get(
            f"/api/units/{unit_id}", headers=auth_headers_for(alice)
        ).status_code == 404


class TestMembers:
    def test_invite_flow(self, client, alice, bob, unit_id, email_service):
        response = client.post(
            f"/api/units/{unit_id}/members",
            json={"email": "bob@example.com"},
            headers=auth_headers_for(alice),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["user"]["id"] == bob.id
        assert email_service.sent_emails[0]["to"] == "bob@example.com"

    def test_invite_errors(self, client, alice, bob, unit_id, add_member):
        headers = auth_headers_for(alice)
        add_member(unit_id, bob)

        unknown = client.post(
            f"/api/units/{unit_id}/members",
            json={"email": "ghost@example.com"},
            headers=headers,
        )
        duplicate = client.post(
            f"/api/units/{unit_id}/members",
            json={"email": "bob@example.com"},
            headers=headers,
        )
        by_member = client.post(
            f"/api/units/{unit_id}/members",
            json={"email": "alice@example.com"},
            headers=auth_headers_for(bob),
        )

        assert unknown.status_code == 404
        assert duplicate.status_code == 409
        assert by_member.status_code == 403

    def test_sole_admin_cannot_demote_self(self, client, db_session, alice, unit_id):
        own = db_session.query(UnitMember).filter_by(user_id=alice.id).one()

        response = client.put(
            f"/api/units/{unit_id}/members/{own.id}",
            json={"role": "member"},
            headers=auth_headers_for(alice),
        )

        assert response.status_code == 400
        db_session.expire_all()
        assert db_session.get(UnitMember, own.id).role == UnitRole.ADMIN.value

    def test_remove_member_unassigns_tasks(
        self, client, alice, bob, unit_id, add_member, make_task
    ):
        membership = add_member(unit_id, bob)
        make_task(unit_id, alice, assignee=bob)

        response = client.delete(
            f"/api/units/{unit_id}/members/{membership.id}",
            headers=auth_headers_for(alice),
        )

        assert response.status_code == 200
        assert response.json()["data"]["unassigned_tasks"] == 1

    def test_block_member(self, client, alice, bob, unit_id, add_member):
        membership = add_member(unit_id, bob)

        response = client.post(
            f"/api/units/{unit_id}/members/{membership.id}/block",
            headers=auth_headers_for(alice),
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == MemberStatus.BLOCKED.value
        assert client.get(
            f"/api/units/{unit_id}", headers=auth_headers_for(bob)
        ).status_code == 403

    def test_list_members(self, client, alice, bob, unit_id, add_member):
        add_member(unit_id, bob)

        response = client.get(
            f"/api/units/{unit_id}/members", headers=auth_headers_for(bob)
        )

        assert response.status_code == 200
        assert {m["user"]["username"] for m in response.json()["data"]} == {"alice", "bob"}
