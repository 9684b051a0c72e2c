"""
Tests for registration, login and bearer-token authentication.
"""

import pytest

from app.services.auth_service import AuthService
from app.services.errors import ValidationError
from app.utils.security import decode_access_token
from tests.conftest import create_test_token, auth_headers_for


def register(client, **overrides):
    payload = {
        "username": "alice",
        "email": "alice@example.com",
        "password": "CorrectHorse1",
    }
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


class TestRegister:
    def test_register_returns_user_and_token(self, client):
        response = register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["username"] == "alice"
        assert "hashed_password" not in body["data"]["user"]
        assert decode_access_token(body["data"]["token"]) == body["data"]["user"]["id"]

    def test_register_with_phone_only(self, client):
        response = register(client, email=None, phone="+15550109999")

        assert response.status_code == 201
        assert response.json()["data"]["user"]["phone"] == "+15550109999"

    def test_duplicate_email_conflicts(self, client):
        register(client)
        response = register(client, username="alice2", email="ALICE@example.com")

        assert response.status_code == 409

    def test_email_or_phone_required(self, client):
        response = register(client, email=None)
        assert response.status_code == 400

    def test_short_password(self, client):
        response = register(client, password="short")
        assert response.status_code == 400

    def test_malformed_email(self, client):
        response = register(client, email="not-an-email")
        assert response.status_code == 400

    @pytest.mark.parametrize(
        "password", ["alllowercase1", "ALLUPPERCASE1", "NoDigitsHere", "Sh0rt"]
    )
    def test_weak_password(self, client, password):
        response = register(client, password=password)
        assert response.status_code == 400

    @pytest.mark.parametrize(
        "username", ["al", "a" * 31, "alice_b", "alice.b", "alice-b", "alicé"]
    )
    def test_username_must_be_alphanumeric_3_to_30(self, client, username):
        response = register(client, username=username)
        assert response.status_code == 400

    def test_username_of_30_characters_is_accepted(self, client):
        response = register(client, username="a" * 30)
        assert response.status_code == 201

    @pytest.mark.parametrize(
        "phone", ["5550101234", "+0123456789", "+1 555 010 9999", "+1234567890123456"]
    )
    def test_phone_must_be_e164(self, client, phone):
        response = register(client, email=None, phone=phone)
        assert response.status_code == 400

    def test_service_rejects_weak_password(self, db_session):
        with pytest.raises(ValidationError):
            AuthService(db_session).register(
                "alice", "alllowercase", email="alice@example.com"
            )


class TestLogin:
    def test_login_by_email_username_or_phone(self, client):
        register(client, phone="+15550101234")

        for identifier in ("alice@example.com", "alice", "+15550101234"):
            response = client.post(
                "/api/auth/login",
                json={"identifier": identifier, "password": "CorrectHorse1"},
            )
            assert response.status_code == 200, identifier
            assert response.json()["data"]["user"]["username"] == "alice"

    def test_login_accepts_email_field(self, client):
        register(client)
        response = client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "CorrectHorse1"},
        )
        assert response.status_code == 200

    def test_wrong_password(self, client):
        register(client)
        response = client.post(
            "/api/auth/login", json={"identifier": "alice", "password": "WrongHorse1"}
        )
        assert response.status_code == 401

    def test_unknown_user(self, client):
        response = client.post(
            "/api/auth/login", json={"identifier": "nobody", "password": "Whatever1"}
        )
        assert response.status_code == 401


class TestCurrentUser:
    def test_me_with_valid_token(self, client, make_user):
        user = make_user("alice")
        response = client.get("/api/auth/me", headers=auth_headers_for(user))

        assert response.status_code == 200
        assert response.json()["data"]["id"] == user.id

    def test_missing_auth_header(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_malformed_header(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Token abc"})
        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.get(
            "/api/auth/me", headers={"Authorization": "Bearer invalid-token"}
        )
        assert response.status_code == 401

    def test_expired_token(self, client, make_user):
        user = make_user("alice")
        token = create_test_token(user, expired=True)
        response = client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    def test_inactive_user_is_rejected(self, client, db_session, make_user):
        user = make_user("alice")
        headers = auth_headers_for(user)
        user.is_active = False
        db_session.commit()

        assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["service"] == "hometeam-api"
