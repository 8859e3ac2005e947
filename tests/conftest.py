"""
Shared fixtures.

The app never talks to a real backend in tests: `FakeHttp` stands in for the
requests.Session handed to create_app() and records every call it receives.
Unknown routes answer 404, like the backend does.
"""

from json import dumps
from types import SimpleNamespace

import pytest

from toratau import create_app
from toratau.session import TOKEN_KEY

BASE_URL = "http://backend.test/api"


def pytest_configure(config) -> None:
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external dependencies)")


class FakeResponse:
    def __init__(self, status_code: int = 200, body=None):
        self.status_code = status_code
        self._body = body
        self.content = b"" if body is None else dumps(body).encode()

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeHttp:
    def __init__(self):
        self.routes = {}
        self.calls = []

    def on(self, method: str, path: str, body=None, status: int = 200) -> None:
        """`body` may be a callable receiving the JSON payload."""
        self.routes[(method.upper(), path)] = (status, body)

    def request(self, method, url, headers=None, json=None, params=None, timeout=None):
        path = url[len(BASE_URL):] if url.startswith(BASE_URL) else url
        self.calls.append(
            SimpleNamespace(method=method, path=path, headers=headers or {}, json=json, params=params)
        )
        status, body = self.routes.get((method, path), (404, {"detail": "Not Found"}))
        if callable(body):
            body = body(json)
        return FakeResponse(status, body)

    def called(self, method: str, path: str | None = None) -> list:
        return [c for c in self.calls if c.method == method and (path is None or c.path == path)]


def user_payload(role: str = "admin", **overrides) -> dict:
    data = {
        "id": 1,
        "username": f"{role}-user",
        "full_name": f"{role.title()} User",
        "role": role,
        "is_active": True,
        "portal_id": "portal-1",
        "project_ids": None,
    }
    data.update(overrides)
    return data


def project_payload(project_id: int = 1, **overrides) -> dict:
    data = {
        "id": project_id,
        "name": f"Project {project_id}",
        "address": "Main st. 1",
        "client": "ACME",
        "start_date": "2024-03-01T00:00:00",
        "end_date": None,
        "status": "in_progress",
        "contract_amount": 100000,
        "planned_cost": 60000,
        "notes": "",
        "created_at": "2024-03-01T10:00:00",
        "updated_at": "2024-03-01T10:00:00",
    }
    data.update(overrides)
    return data


def portal_payload(portal_id: str = "p1", **overrides) -> dict:
    data = {
        "id": portal_id,
        "name": f"Portal {portal_id}",
        "ownerEmail": f"owner@{portal_id}.test",
        "status": "active",
        "subscription": {"plan": "basic", "isPaid": True, "paidUntil": None},
        "limits": {"maxUsers": 10, "maxStorageMb": 1000},
        "usersCount": 3,
        "createdAt": "2024-01-01T00:00:00Z",
    }
    data.update(overrides)
    return data


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def app(http):
    return create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "RATELIMIT_ENABLED": False,
            "API_BASE_URL": BASE_URL,
        },
        http=http,
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(client, http):
    """
    Put a token in the session cookie and make /auth/me accept it.
    Returns the user payload the backend reports.
    """

    def _login(role: str = "admin", subscription: dict | None = None, **overrides) -> dict:
        user = user_payload(role, **overrides)
        http.on("GET", "/auth/me", user)
        if subscription is not None:
            http.on("GET", "/billing/portal-subscription", subscription)
        with client.session_transaction() as sess:
            sess[TOKEN_KEY] = "token-123"
        return user

    return _login
