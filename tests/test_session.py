"""
Name: Session / Auth Service Tests

Responsibilities:
  - Login persists token and user
  - Restoration through /auth/me, and clean-up when the token is rejected
  - Foreman project visibility
"""

import json

import pytest

from toratau.api import ApiClient
from toratau.models import Project, User
from toratau.session import TOKEN_KEY, USER_KEY, AuthService, SessionStore, visible_projects

from .conftest import BASE_URL, FakeHttp, user_payload

pytestmark = pytest.mark.unit


def _service(http, backend):
    store = SessionStore(backend)
    return AuthService(lambda token: ApiClient(BASE_URL, token=token, http=http), store), store


def test_login_persists_token_and_user():
    http = FakeHttp()
    http.on("POST", "/auth/login", {"access_token": "abc", "token_type": "bearer", "user": user_payload()})
    backend = {}
    service, store = _service(http, backend)

    user = service.login("admin-user", "pw")

    assert user.is_admin
    assert backend[TOKEN_KEY] == "abc"
    assert json.loads(backend[USER_KEY])["username"] == "admin-user"
    assert "Authorization" not in http.calls[0].headers


def test_restore_uses_token():
    http = FakeHttp()
    http.on("GET", "/auth/me", user_payload("foreman", project_ids=[1, 2]))
    service, store = _service(http, {TOKEN_KEY: "abc"})

    user = service.restore()

    assert user.is_foreman
    assert user.project_ids == [1, 2]
    assert http.calls[0].headers["Authorization"] == "Bearer abc"
    assert store.stored_user().username == "foreman-user"


def test_rejected_token_clears_store():
    http = FakeHttp()
    http.on("GET", "/auth/me", {"detail": "Could not validate credentials"}, status=401)
    backend = {TOKEN_KEY: "stale", USER_KEY: User.from_dict(user_payload()).to_json()}
    service, store = _service(http, backend)

    assert service.restore() is None
    assert TOKEN_KEY not in backend
    assert USER_KEY not in backend
    assert not service.is_admin


def test_restore_without_token_makes_no_call():
    http = FakeHttp()
    service, _ = _service(http, {})
    assert service.restore() is None
    assert http.calls == []


def test_malformed_user_payload_is_treated_as_logged_out():
    http = FakeHttp()
    http.on("GET", "/auth/me", {"username": "no-id"})
    backend = {TOKEN_KEY: "abc"}
    service, _ = _service(http, backend)

    assert service.restore() is None
    assert backend == {}


def test_logout_clears_only_auth_keys():
    backend = {TOKEN_KEY: "abc", USER_KEY: "{}", "portal_logo": "Acme"}
    service, _ = _service(FakeHttp(), backend)
    service.logout()
    assert backend == {"portal_logo": "Acme"}


def test_foreman_sees_only_assigned_projects():
    projects = [Project(id=i, name=f"P{i}") for i in (1, 2, 3)]
    foreman = User.from_dict(user_payload("foreman", project_ids=[2]))
    admin = User.from_dict(user_payload("admin"))
    unrestricted = User.from_dict(user_payload("foreman", project_ids=None))

    assert [p.id for p in visible_projects(foreman, projects)] == [2]
    assert len(visible_projects(admin, projects)) == 3
    assert len(visible_projects(unrestricted, projects)) == 3
