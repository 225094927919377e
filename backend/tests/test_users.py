"""Tests for /api/users."""

from app.models.auth_identity import AuthIdentity
from app.models.user import User

from tests.conftest import DEFAULT_PASSWORD


def _new_user(**overrides):
    body = {
        "name": "Dana",
        "email": "dana@example.com",
        "password": "dana-pass-1",
        "userType": "user",
    }
    body.update(overrides)
    return body


class TestListUsers:
    def test_admin_sees_everyone(self, client, admin, alice, bob):
        response = client.get("/api/users", headers=admin[1])

        assert response.status_code == 200
        emails = {u["email"] for u in response.json()["users"]}
        assert emails == {"admin@example.com", "alice@example.com", "bob@example.com"}

    def test_regular_user_is_forbidden(self, client, alice):
        response = client.get("/api/users", headers=alice[1])

        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "Only admins can view users"}

    def test_unauthenticated(self, client):
        assert client.get("/api/users").status_code == 401


class TestCreateUser:
    def test_admin_creates_a_user_who_can_log_in(self, client, admin, make_department, count_rows):
        d = make_department("Finance")

        response = client.post("/api/users/create", headers=admin[1], json=_new_user(department_id=d.id))

        assert response.status_code == 201
        user = response.json()["user"]
        assert user["email"] == "dana@example.com"
        assert user["department_id"] == d.id
        assert count_rows(AuthIdentity, AuthIdentity.id == user["id"]) == 1

        login = client.post("/api/login", json={"email": "dana@example.com", "password": "dana-pass-1"})
        assert login.status_code == 200

    def test_duplicate_email_leaves_nothing_behind(self, client, admin, alice, count_rows):
        identities_before = count_rows(AuthIdentity)

        response = client.post("/api/users/create", headers=admin[1], json=_new_user(email="alice@example.com"))

        assert response.status_code == 409
        assert count_rows(AuthIdentity) == identities_before
        assert count_rows(User) == 2

    def test_profile_failure_rolls_back_the_identity(self, client, admin, count_rows):
        identities_before = count_rows(AuthIdentity)

        response = client.post("/api/users/create", headers=admin[1], json=_new_user(department_id=999))

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to create user record"
        assert count_rows(AuthIdentity) == identities_before
        assert count_rows(AuthIdentity, AuthIdentity.email == "dana@example.com") == 0

        # the email is free again
        retry = client.post("/api/users/create", headers=admin[1], json=_new_user())
        assert retry.status_code == 201

    def test_validation(self, client, admin):
        assert client.post("/api/users/create", headers=admin[1], json=_new_user(password="short")).status_code == 400
        assert client.post("/api/users/create", headers=admin[1], json=_new_user(userType="owner")).status_code == 400
        assert client.post("/api/users/create", headers=admin[1], json={"email": "x@example.com"}).status_code == 400

    def test_regular_user_is_forbidden(self, client, alice, count_rows):
        response = client.post("/api/users/create", headers=alice[1], json=_new_user())

        assert response.status_code == 403
        assert count_rows(User) == 1


class TestGetUser:
    def test_found(self, client, admin, alice):
        response = client.get(f"/api/users/{alice[0].id}", headers=admin[1])

        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Alice"

    def test_missing(self, client, admin):
        response = client.get("/api/users/does-not-exist", headers=admin[1])
        assert response.status_code == 404
        assert response.json()["message"] == "User not found"


class TestUpdateUser:
    def test_partial_update(self, client, admin, alice, make_department):
        d = make_department("IT")

        response = client.put(
            f"/api/users/{alice[0].id}",
            headers=admin[1],
            json={"name": "Alice Liddell", "department_id": d.id},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "User updated successfully"
        assert data["user"]["name"] == "Alice Liddell"
        assert data["user"]["department_id"] == d.id
        assert data["user"]["email"] == "alice@example.com"

    def test_promote_to_admin(self, client, admin, alice):
        response = client.put(f"/api/users/{alice[0].id}", headers=admin[1], json={"user_type": "admin"})

        assert response.status_code == 200
        assert client.get("/api/users", headers=alice[1]).status_code == 200

    def test_email_change_follows_through_to_login(self, client, admin, alice, count_rows):
        response = client.put(
            f"/api/users/{alice[0].id}",
            headers=admin[1],
            json={"email": "Alice.New@Example.com"},
        )

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "alice.new@example.com"
        assert count_rows(AuthIdentity, AuthIdentity.email == "alice.new@example.com") == 1

        old = client.post("/api/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD})
        new = client.post("/api/login", json={"email": "alice.new@example.com", "password": DEFAULT_PASSWORD})
        assert old.status_code == 401
        assert new.status_code == 200

    def test_email_taken_by_someone_else(self, client, admin, alice, bob):
        response = client.put(f"/api/users/{alice[0].id}", headers=admin[1], json={"email": "bob@example.com"})

        assert response.status_code == 409

    def test_no_fields(self, client, admin, alice):
        response = client.put(f"/api/users/{alice[0].id}", headers=admin[1], json={"name": "   "})

        assert response.status_code == 400
        assert response.json()["message"] == "No valid fields to update"

    def test_invalid_user_type(self, client, admin, alice):
        response = client.put(f"/api/users/{alice[0].id}", headers=admin[1], json={"user_type": "root"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid user type"

    def test_invalid_email(self, client, admin, alice):
        response = client.put(f"/api/users/{alice[0].id}", headers=admin[1], json={"email": "nope"})
        assert response.status_code == 400

    def test_missing(self, client, admin):
        assert client.put("/api/users/nobody", headers=admin[1], json={"name": "X"}).status_code == 404


class TestDeleteUser:
    def test_delete_removes_profile_and_identity(self, client, admin, alice, count_rows):
        user_id = alice[0].id

        response = client.delete(f"/api/users/{user_id}", headers=admin[1])

        assert response.status_code == 200
        assert response.json()["message"] == "User deleted successfully"
        assert count_rows(User, User.id == user_id) == 0
        assert count_rows(AuthIdentity, AuthIdentity.id == user_id) == 0

        # the old token no longer resolves to anyone
        assert client.get("/api/me", headers=alice[1]).status_code == 401

    def test_cannot_delete_self(self, client, admin, count_rows):
        response = client.delete(f"/api/users/{admin[0].id}", headers=admin[1])

        assert response.status_code == 400
        assert response.json()["message"] == "You cannot delete your own account"
        assert count_rows(User) == 1

    def test_blocked_while_user_owns_assets(self, client, admin, alice, make_asset, count_rows):
        make_asset(alice[0])

        response = client.delete(f"/api/users/{alice[0].id}", headers=admin[1])

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete user: they have assets assigned to them"
        assert count_rows(User, User.id == alice[0].id) == 1

    def test_missing(self, client, admin):
        assert client.delete("/api/users/nobody", headers=admin[1]).status_code == 404

    def test_regular_user_is_forbidden(self, client, alice, bob):
        assert client.delete(f"/api/users/{bob[0].id}", headers=alice[1]).status_code == 403
