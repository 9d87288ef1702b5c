"""Tests for admin user management routes."""
from datetime import datetime, timedelta

import pytest

from backoffice.models import Role, RoleName, User


@pytest.fixture
def admin(make_user, auth_headers):
    return auth_headers(make_user("admin", roles=["ADMIN"]))


class TestAccountStatus:

    def test_reports_lock_state(self, client, make_user, admin):
        locked = make_user(
            "locked",
            failed_login_attempts=5,
            account_locked_until=datetime.utcnow() + timedelta(minutes=30),
        )

        response = client.get(f"/api/v1/admin/users/{locked.id}/account-status", headers=admin)

        data = response.get_json()
        assert response.status_code == 200
        assert data["username"] == "locked"
        assert data["is_locked"] is True
        assert data["failed_login_attempts"] == 5

    def test_unknown_user_is_404(self, client, admin):
        response = client.get(
            "/api/v1/admin/users/00000000-0000-0000-0000-000000000000/account-status",
            headers=admin,
        )

        assert response.status_code == 404

    def test_requires_admin_role(self, client, make_user, auth_headers):
        manager = make_user("manager", roles=["MANAGER"])

        response = client.get(
            f"/api/v1/admin/users/{manager.id}/account-status",
            headers=auth_headers(manager),
        )

        assert response.status_code == 403


class TestAccountActions:

    def test_unlock_clears_counter(self, client, make_user, admin):
        locked = make_user(
            "locked",
            failed_login_attempts=5,
            account_locked_until=datetime.utcnow() + timedelta(minutes=30),
        )

        response = client.post(f"/api/v1/admin/users/{locked.id}/unlock", headers=admin)

        assert response.status_code == 200
        assert locked.failed_login_attempts == 0
        assert locked.account_locked_until is None

    def test_toggle_status_deactivates_then_activates(self, client, make_user, admin):
        user = make_user("crew")

        first = client.post(f"/api/v1/admin/users/{user.id}/toggle-status", headers=admin)
        second = client.post(f"/api/v1/admin/users/{user.id}/toggle-status", headers=admin)

        assert first.get_json()["message"] == "User deactivated"
        assert second.get_json()["message"] == "User activated"
        assert user.is_active is True

    def test_delete_regular_user(self, client, db, make_user, admin):
        user = make_user("crew")
        user_id = user.id

        response = client.delete(f"/api/v1/admin/users/{user_id}", headers=admin)

        assert response.status_code == 200
        assert db.session.get(User, user_id) is None

    def test_admin_cannot_be_deleted(self, client, make_user, admin):
        other_admin = make_user("second-admin", roles=["ADMIN"])

        response = client.delete(f"/api/v1/admin/users/{other_admin.id}", headers=admin)

        assert response.status_code == 400
        assert response.get_json()["code"] == "PROTECTED_USER"


@pytest.fixture
def crew_roles(db):
    for name in (RoleName.OPERATOR, RoleName.VIEWER):
        db.session.add(Role(name=name, is_system=False))
    db.session.commit()


def new_user(**overrides):
    data = {
        "username": "deckhand",
        "email": "Deckhand@Example.com",
        "password": "Harbour-2026!",
        "first_name": "Aminata",
        "last_name": "Diallo",
        "roles": ["OPERATOR"],
    }
    data.update(overrides)
    return data


class TestListUsers:

    def test_lists_with_total(self, client, make_user, admin):
        make_user("bosun", roles=["OPERATOR"])
        make_user("purser", roles=["VIEWER"])

        response = client.get("/api/v1/admin/users?limit=2", headers=admin)

        data = response.get_json()
        assert response.status_code == 200
        assert data["total"] == 3
        assert data["limit"] == 2
        assert [u["username"] for u in data["users"]] == ["admin", "bosun"]

    def test_search_and_role_filters(self, client, make_user, admin):
        make_user("bosun", roles=["OPERATOR"], last_name="Ndiaye")
        make_user("purser", roles=["VIEWER"])

        by_name = client.get("/api/v1/admin/users?search=ndia", headers=admin).get_json()
        by_role = client.get("/api/v1/admin/users?role=VIEWER", headers=admin).get_json()

        assert [u["username"] for u in by_name["users"]] == ["bosun"]
        assert [u["username"] for u in by_role["users"]] == ["purser"]

    def test_active_filter(self, client, make_user, admin):
        make_user("retired", is_active=False)

        response = client.get("/api/v1/admin/users?is_active=false", headers=admin)

        assert [u["username"] for u in response.get_json()["users"]] == ["retired"]

    def test_search_endpoint_takes_body(self, client, make_user, admin):
        make_user("bosun", roles=["OPERATOR"])

        response = client.post(
            "/api/v1/admin/users/search",
            json={"search": "bos", "is_active": True},
            headers=admin,
        )

        assert response.get_json()["total"] == 1

    def test_requires_admin_role(self, client, make_user, auth_headers):
        manager = make_user("manager", roles=["MANAGER"])

        response = client.get("/api/v1/admin/users", headers=auth_headers(manager))

        assert response.status_code == 403


class TestCreateAndUpdateUsers:

    def test_create_user_can_sign_in(self, client, admin, crew_roles):
        response = client.post("/api/v1/admin/users", json=new_user(), headers=admin)

        user = response.get_json()["user"]
        assert response.status_code == 201
        assert user["email"] == "deckhand@example.com"
        assert user["roles"] == ["OPERATOR"]
        assert user["is_active"] is True
        assert "password" not in user

        login = client.post(
            "/api/v1/auth/login",
            json={"username": "deckhand", "password": "Harbour-2026!"},
        )
        assert login.status_code == 200

    def test_duplicate_username_is_409(self, client, make_user, admin, crew_roles):
        make_user("deckhand")

        response = client.post("/api/v1/admin/users", json=new_user(), headers=admin)

        assert response.status_code == 409

    def test_missing_role_row_is_400(self, client, admin):
        response = client.post(
            "/api/v1/admin/users", json=new_user(roles=["MANAGER"]), headers=admin
        )

        assert response.status_code == 400
        assert response.get_json()["details"] == {"roles": ["MANAGER"]}

    def test_unknown_role_name_is_400(self, client, admin):
        response = client.post(
            "/api/v1/admin/users", json=new_user(roles=["CAPTAIN"]), headers=admin
        )

        assert response.status_code == 400

    def test_get_user(self, client, make_user, admin):
        user = make_user("bosun")

        response = client.get(f"/api/v1/admin/users/{user.id}", headers=admin)

        assert response.get_json()["user"]["username"] == "bosun"

    def test_get_unknown_user_is_404(self, client, admin):
        response = client.get(
            "/api/v1/admin/users/00000000-0000-0000-0000-000000000000", headers=admin
        )

        assert response.status_code == 404

    def test_update_profile_and_roles(self, client, make_user, admin, crew_roles):
        user = make_user("bosun", roles=["OPERATOR"])

        response = client.put(
            f"/api/v1/admin/users/{user.id}",
            json={"first_name": "Moussa", "roles": ["VIEWER"], "is_active": False},
            headers=admin,
        )

        body = response.get_json()["user"]
        assert response.status_code == 200
        assert body["first_name"] == "Moussa"
        assert body["roles"] == ["VIEWER"]
        assert body["is_active"] is False
        assert user.updated_by == "admin"

    def test_update_to_taken_email_is_409(self, client, make_user, admin):
        make_user("purser")
        user = make_user("bosun")

        response = client.put(
            f"/api/v1/admin/users/{user.id}",
            json={"email": "PURSER@example.com"},
            headers=admin,
        )

        assert response.status_code == 409


class TestCanDelete:

    def test_regular_user_can_be_deleted(self, client, make_user, admin):
        user = make_user("crew")

        response = client.get(f"/api/v1/admin/users/{user.id}/can-delete", headers=admin)

        assert response.get_json() == {"can_delete": True}

    def test_system_role_holder_cannot(self, client, make_user, admin):
        other_admin = make_user("second-admin", roles=["ADMIN"])

        response = client.get(
            f"/api/v1/admin/users/{other_admin.id}/can-delete", headers=admin
        )

        assert response.get_json() == {"can_delete": False}

    def test_unknown_user_is_404(self, client, admin):
        response = client.get(
            "/api/v1/admin/users/00000000-0000-0000-0000-000000000000/can-delete",
            headers=admin,
        )

        assert response.status_code == 404
