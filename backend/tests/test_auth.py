"""
Authentication and session tests.

Verifies:
- Registration validates input, rejects duplicates and returns a session
- Login by username or email; bad credentials are rejected
- Password hashes never leave the API
- Logout, idle timeout and absolute timeout end a session
"""

from datetime import timedelta

import pytest

from vault.services import session_service
from vault.services.auth_service import PasswordValidationError, hash_password, verify_password
from vault.storage import get_storage
from vault.time_utils import to_utc_z, utcnow


PASSWORD = "Password123"


REGISTRATION = {
    "username": "newbie",
    "password": PASSWORD,
    "full_name": "New Person",
    "email": "newbie@iwb.test",
    "role": "sales",
}


# =============================================================================
# REGISTRATION
# =============================================================================


class TestRegister:

    def test_register_returns_user_and_token(self, client):
        resp = client.post("/api/register", json=REGISTRATION)

        assert resp.status_code == 201
        assert resp.json["user"]["username"] == "newbie"
        assert "password_hash" not in resp.json["user"]
        assert len(resp.json["token"]) == 64

        me = client.get("/api/user", headers={"Authorization": f"Bearer {resp.json['token']}"})
        assert me.status_code == 200
        assert me.json["email"] == "newbie@iwb.test"

    def test_password_is_hashed(self, client):
        client.post("/api/register", json=REGISTRATION)
        stored = get_storage().get_user_by_username("newbie")
        assert stored["password_hash"] != PASSWORD
        assert verify_password(PASSWORD, stored["password_hash"])

    def test_duplicate_username(self, client):
        client.post("/api/register", json=REGISTRATION)
        resp = client.post("/api/register", json={**REGISTRATION, "email": "other@iwb.test"})

        assert resp.status_code == 400
        assert resp.json["errors"] == [{"field": "username", "message": "Username already exists"}]

    def test_duplicate_email(self, client):
        client.post("/api/register", json=REGISTRATION)
        resp = client.post("/api/register", json={**REGISTRATION, "username": "other"})

        assert resp.status_code == 400
        assert resp.json["errors"] == [{"field": "email", "message": "Email already exists"}]

    def test_weak_password(self, client):
        resp = client.post("/api/register", json={**REGISTRATION, "password": "password"})

        assert resp.status_code == 400
        assert resp.json["errors"][0]["field"] == "password"
        assert get_storage().get_user_by_username("newbie") is None

    def test_invalid_payload(self, client):
        resp = client.post("/api/register", json={"username": "x"})

        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid user data"
        fields = {e["field"] for e in resp.json["errors"]}
        assert fields == {"password", "full_name", "email", "role"}


# =============================================================================
# LOGIN / LOGOUT
# =============================================================================


class TestLogin:

    def test_login_by_username(self, client, users):
        resp = client.post("/api/login", json={"username": "sales_user", "password": PASSWORD})

        assert resp.status_code == 200
        assert resp.json["user"]["role"] == "sales"
        assert "password_hash" not in resp.json["user"]
        assert "RESPOND_QUERIES" in resp.json["permissions"]

    def test_login_by_email(self, client, users):
        resp = client.post("/api/login", json={"email": "finance_user@iwb.test", "password": PASSWORD})
        assert resp.status_code == 200
        assert resp.json["user"]["username"] == "finance_user"

    def test_wrong_password(self, client, users):
        resp = client.post("/api/login", json={"username": "sales_user", "password": "Wrong1234"})
        assert resp.status_code == 401
        assert resp.json == {"message": "Invalid credentials"}

    def test_unknown_user(self, client, users):
        resp = client.post("/api/login", json={"username": "ghost", "password": PASSWORD})
        assert resp.status_code == 401

    def test_missing_fields(self, client):
        resp = client.post("/api/login", json={"username": "sales_user"})
        assert resp.status_code == 400

    def test_logout_revokes_token(self, client, sales_headers):
        assert client.get("/api/user", headers=sales_headers).status_code == 200

        resp = client.post("/api/logout", headers=sales_headers)
        assert resp.status_code == 200

        assert client.get("/api/user", headers=sales_headers).status_code == 401


# =============================================================================
# SESSIONS
# =============================================================================


class TestSessions:

    def test_validate_session_updates_last_used(self, app, users):
        session, token = session_service.create_session(users["sales"]["id"])
        stale = utcnow() - timedelta(minutes=30)
        get_storage().update_session_token(session["id"], {"last_used_at": stale})

        context = session_service.validate_session(token)

        assert context.user["id"] == users["sales"]["id"]
        assert context.session["last_used_at"] > to_utc_z(stale)

    def test_idle_timeout(self, app, users):
        session, token = session_service.create_session(users["sales"]["id"])
        get_storage().update_session_token(session["id"], {"last_used_at": utcnow() - timedelta(hours=3)})

        assert session_service.validate_session(token) is None
        row = get_storage().get_session_token(session_service.hash_token(token))
        assert row["is_revoked"] is True
        assert row["revoked_reason"] == "Idle timeout"

    def test_absolute_timeout(self, app, users):
        session, token = session_service.create_session(users["sales"]["id"])
        get_storage().update_session_token(session["id"], {"expires_at": utcnow() - timedelta(seconds=1)})

        assert session_service.validate_session(token) is None

    def test_deleted_user_invalidates_session(self, app, users):
        _, token = session_service.create_session(users["sales"]["id"])
        get_storage().clear_table("users")

        assert session_service.validate_session(token) is None

    def test_token_stored_hashed(self, app, users):
        session, token = session_service.create_session(users["sales"]["id"])
        assert session["token_hash"] == session_service.hash_token(token)
        assert session["token_hash"] != token

    @pytest.mark.parametrize("weak", ["Short1", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"])
    def test_hash_password_enforces_strength(self, app, weak):
        with pytest.raises(PasswordValidationError):
            hash_password(weak)
