"""Tests for authentication routes."""
from unittest.mock import patch

import pytest

from backoffice.models import Role, RoleName, User
from backoffice.services.password_hasher import hash_password

PASSWORD = "Sup3rSecret!"


@pytest.fixture(scope="module")
def password_hash():
    return hash_password(PASSWORD)


class TestLogin:

    def test_login_returns_token_pair(self, client, make_user, password_hash):
        make_user("captain", roles=["OPERATOR"], password_hash=password_hash)

        response = client.post(
            "/api/v1/auth/login",
            json={"username_or_email": "captain", "password": PASSWORD},
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data["token_type"] == "Bearer"
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["expires_in"] in (1439, 1440)
        assert data["user"]["roles"] == ["OPERATOR"]

    def test_login_by_email_alias(self, client, make_user, password_hash):
        make_user("captain", password_hash=password_hash)

        response = client.post(
            "/api/v1/auth/login",
            json={"email": "CAPTAIN@example.com", "password": PASSWORD},
        )

        assert response.status_code == 200

    def test_wrong_password_is_401(self, client, make_user, password_hash):
        make_user("captain", password_hash=password_hash)

        response = client.post(
            "/api/v1/auth/login",
            json={"username_or_email": "captain", "password": "nope"},
        )

        assert response.status_code == 401
        assert response.get_json()["code"] == "INVALID_CREDENTIALS"

    def test_unknown_user_gets_same_error(self, client):
        response = client.post(
            "/api/v1/auth/login",
            json={"username_or_email": "ghost", "password": "nope"},
        )

        assert response.status_code == 401
        assert response.get_json()["code"] == "INVALID_CREDENTIALS"

    def test_five_failures_lock_the_account(self, client, make_user, password_hash):
        user = make_user("captain", password_hash=password_hash)

        for _ in range(5):
            client.post(
                "/api/v1/auth/login",
                json={"username_or_email": "captain", "password": "nope"},
            )

        response = client.post(
            "/api/v1/auth/login",
            json={"username_or_email": "captain", "password": PASSWORD},
        )

        assert response.status_code == 423
        assert response.get_json()["code"] == "ACCOUNT_LOCKED"
        assert user.failed_login_attempts == 5

    def test_missing_fields_is_400(self, client):
        response = client.post("/api/v1/auth/login", json={})

        assert response.status_code == 400
        data = response.get_json()
        assert data["code"] == "VALIDATION_ERROR"
        assert "password" in data["details"]


class TestRefreshAndValidate:

    def test_refresh_issues_new_pair(self, app, client, make_user):
        user = make_user("captain")
        refresh = app.container.jwt_service().generate_refresh_token(user)

        response = client.post("/api/v1/auth/refresh-token", json={"refresh_token": refresh})

        assert response.status_code == 200
        assert response.get_json()["access_token"]

    def test_refresh_rejects_access_token(self, app, client, make_user):
        user = make_user("captain")
        access = app.container.jwt_service().generate_access_token(user)

        response = client.post("/api/v1/auth/refresh-token", json={"refresh_token": access})

        assert response.status_code == 401

    def test_validate_token_describes_token(self, client, make_user, auth_headers):
        user = make_user("captain", roles=["MANAGER"])

        response = client.get("/api/v1/auth/validate-token", headers=auth_headers(user))

        data = response.get_json()
        assert response.status_code == 200
        assert data["valid"] is True
        assert data["username"] == "captain"
        assert data["roles"] == ["MANAGER"]
        assert data["remaining_seconds"] > 0


class TestRegistration:

    def register(self, client, **overrides):
        payload = {
            "username": "newbie",
            "email": "Newbie@Example.com",
            "password": PASSWORD,
            "confirm_password": PASSWORD,
        }
        payload.update(overrides)
        return client.post("/api/v1/auth/register", json=payload)

    def test_register_then_verify(self, db, client):
        db.session.add(Role(name=RoleName.USER))
        db.session.commit()

        response = self.register(client)

        assert response.status_code == 201
        user = db.session.query(User).filter_by(username="newbie").one()
        assert user.email == "newbie@example.com"
        assert user.is_active is False
        assert user.role_names == ["USER"]

        response = client.get(
            f"/api/v1/auth/verify-email?token={user.email_verification_token}"
        )

        assert response.status_code == 200
        assert user.is_active is True
        assert user.email_verified is True

    def test_duplicate_username_is_409(self, client, make_user):
        make_user("newbie")

        response = self.register(client, email="other@example.com")

        assert response.status_code == 409

    def test_password_mismatch_is_400(self, client):
        response = self.register(client, confirm_password="different")

        assert response.status_code == 400

    def test_check_username(self, client, make_user):
        make_user("taken")

        assert client.get("/api/v1/auth/check-username?username=taken").get_json() == {
            "available": False
        }
        assert client.get("/api/v1/auth/check-username?username=free").get_json() == {
            "available": True
        }


class TestPasswordFlows:

    def test_forgot_password_always_succeeds(self, client):
        response = client.post(
            "/api/v1/auth/forgot-password", json={"email": "ghost@example.com"}
        )

        assert response.status_code == 200
        assert response.get_json()["success"] is True

    def test_forgot_then_reset(self, app, db, client, make_user):
        user = make_user("captain")

        with patch.object(
            app.container.email_service(), "send_password_reset_email"
        ) as mock_send:
            client.post("/api/v1/auth/forgot-password", json={"email": "captain@example.com"})

        token = mock_send.call_args[0][2]
        response = client.post(
            "/api/v1/auth/reset-password",
            json={"token": token, "new_password": "N3wPassword!", "confirm_password": "N3wPassword!"},
        )

        assert response.status_code == 200

        response = client.post(
            "/api/v1/auth/reset-password",
            json={"token": token, "new_password": "An0therOne!", "confirm_password": "An0therOne!"},
        )

        assert response.status_code == 400
        assert response.get_json()["details"]["reason"] == "already_used"

    def test_change_password(self, client, make_user, auth_headers, password_hash):
        user = make_user("captain", password_hash=password_hash)

        response = client.post(
            "/api/v1/auth/change-password",
            json={
                "current_password": PASSWORD,
                "new_password": "N3wPassword!",
                "confirm_password": "N3wPassword!",
            },
            headers=auth_headers(user),
        )

        assert response.status_code == 200
