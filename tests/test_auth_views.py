"""
Name: Authentication Views Tests

Responsibilities:
  - Login stores the session and routes by role
  - Failed login shows the backend message
  - Registration validation and logout
"""

import pytest

from toratau.session import TOKEN_KEY

from .conftest import user_payload

pytestmark = pytest.mark.unit


def _token_response(role="admin"):
    return {"access_token": "fresh-token", "token_type": "bearer", "user": user_payload(role)}


def test_login_page_renders(client):
    resp = client.get("/login")
    assert resp.status_code == 200
    assert b"Log in" in resp.data


def test_login_success_redirects_home(client, http):
    http.on("POST", "/auth/login", _token_response())

    resp = client.post("/login", data={"username": "admin-user", "password": "pw"})

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")
    with client.session_transaction() as sess:
        assert sess[TOKEN_KEY] == "fresh-token"


def test_super_admin_lands_on_console(client, http):
    http.on("POST", "/auth/login", _token_response("superAdmin"))

    resp = client.post("/login", data={"username": "root", "password": "pw"})

    assert resp.headers["Location"].endswith("/super-admin/portals")


def test_login_honours_safe_next_only(client, http):
    http.on("POST", "/auth/login", _token_response())

    ok = client.post("/login", data={"username": "a", "password": "b", "next": "/employees"})
    assert ok.headers["Location"].endswith("/employees")

    with client.session_transaction() as sess:
        sess.clear()
    bad = client.post("/login", data={"username": "a", "password": "b", "next": "https://evil.test/"})
    assert "evil" not in bad.headers["Location"]


def test_login_failure_shows_backend_message(client, http):
    http.on("POST", "/auth/login", {"detail": "Incorrect username or password"}, status=401)

    resp = client.post("/login", data={"username": "a", "password": "b"})

    assert resp.status_code == 200
    assert b"Incorrect username or password" in resp.data
    with client.session_transaction() as sess:
        assert TOKEN_KEY not in sess


def test_login_requires_both_fields(client, http):
    resp = client.post("/login", data={"username": "a", "password": ""})

    assert b"Username and password are required." in resp.data
    assert http.calls == []


def test_register_password_mismatch(client, http):
    resp = client.post(
        "/register",
        data={
            "full_name": "Anna",
            "email": "anna@example.com",
            "username": "anna",
            "password": "secret",
            "confirm_password": "other",
        },
    )

    assert b"Passwords do not match." in resp.data
    assert http.called("POST", "/auth/register") == []


def test_register_logs_in(client, http):
    http.on("POST", "/auth/register", _token_response())

    resp = client.post(
        "/register",
        data={
            "full_name": "Anna",
            "email": "Anna@Example.com",
            "username": "anna",
            "password": "secret",
            "confirm_password": "secret",
        },
    )

    assert resp.status_code == 302
    assert http.called("POST", "/auth/register")[0].json["email"] == "anna@example.com"
    with client.session_transaction() as sess:
        assert sess[TOKEN_KEY] == "fresh-token"


def test_logout_clears_token(client, login_as):
    login_as("admin")

    resp = client.get("/logout")

    assert resp.headers["Location"].endswith("/login")
    with client.session_transaction() as sess:
        assert TOKEN_KEY not in sess


def test_profile_update(client, http, login_as):
    login_as("foreman")
    http.on("PUT", "/auth/profile", user_payload("foreman", full_name="New Name"))

    resp = client.post("/profile", data={"full_name": "New Name"})

    assert resp.status_code == 302
    assert http.called("PUT", "/auth/profile")[0].json == {"full_name": "New Name"}


def test_change_password_rejects_same_password(client, http, login_as):
    login_as("foreman")

    resp = client.post(
        "/change-password",
        data={"current_password": "same", "new_password": "same", "confirm_password": "same"},
    )

    assert b"New password must be different" in resp.data
    assert http.called("POST", "/auth/change-password") == []
