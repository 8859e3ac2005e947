# toratau/session.py
"""
Session persistence and the authentication service.

SessionStore wraps any mutable mapping (the Flask session cookie in the app,
a plain dict in tests) and owns the persisted keys:

- token            bearer token from login/register
- user             JSON copy of the user record (fallback display only)
- portal_logo      tenant display name override
- last_project_id  last project seen in a URL
"""

from __future__ import annotations

import json
from collections.abc import MutableMapping
from typing import Any, Callable, Iterable

from .api import ApiClient, ApiError, SessionExpired
from .api import auth as auth_api
from .models import Project, User

TOKEN_KEY = "token"
USER_KEY = "user"
LOGO_KEY = "portal_logo"
LAST_PROJECT_KEY = "last_project_id"


class SessionStore:
    def __init__(self, backend: MutableMapping[str, Any]):
        self.backend = backend

    # ---- token / user ----
    @property
    def token(self) -> str | None:
        return self.backend.get(TOKEN_KEY) or None

    def save_login(self, token: str, user: User) -> None:
        self.backend[TOKEN_KEY] = token
        self.backend[USER_KEY] = user.to_json()

    def save_user(self, user: User) -> None:
        self.backend[USER_KEY] = user.to_json()

    def stored_user(self) -> User | None:
        raw = self.backend.get(USER_KEY)
        if not raw:
            return None
        try:
            return User.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError):
            return None

    def clear_auth(self) -> None:
        self.backend.pop(TOKEN_KEY, None)
        self.backend.pop(USER_KEY, None)

    # ---- UI preferences ----
    def get(self, key: str, default: Any = None) -> Any:
        return self.backend.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.backend[key] = value


ClientFactory = Callable[[str | None], ApiClient]


class AuthService:
    """
    Holds the current user for one request.

    `api_factory(token)` builds a client for the given token so that a fresh
    login immediately talks to the backend with the new credentials.
    """

    def __init__(self, api_factory: ClientFactory, store: SessionStore):
        self.api_factory = api_factory
        self.store = store
        self.user: User | None = None

    @property
    def token(self) -> str | None:
        return self.store.token

    @property
    def api(self) -> ApiClient:
        return self.api_factory(self.token)

    def restore(self) -> User | None:
        if not self.token:
            self.user = None
            return None

        try:
            self.user = User.from_dict(auth_api.get_me(self.api))
        except (ApiError, SessionExpired, KeyError, TypeError, ValueError):
            # any failure invalidates the stored session
            self.store.clear_auth()
            self.user = None
            return None

        self.store.save_user(self.user)
        return self.user

    def _accept(self, response: dict) -> User:
        token = response["access_token"]
        user = User.from_dict(response["user"])
        self.store.save_login(token, user)
        self.user = user
        return user

    def login(self, username: str, password: str) -> User:
        response = auth_api.login(self.api_factory(None), username, password)
        return self._accept(response)

    def register(self, fields: dict) -> User:
        response = auth_api.register(self.api_factory(None), fields)
        return self._accept(response)

    def logout(self) -> None:
        self.store.clear_auth()
        self.user = None

    def update_profile(self, full_name: str) -> User:
        self.user = User.from_dict(auth_api.update_profile(self.api, full_name))
        self.store.save_user(self.user)
        return self.user

    def change_password(self, current_password: str, new_password: str) -> None:
        auth_api.change_password(self.api, current_password, new_password)

    # ---- role predicates ----
    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.is_admin)

    @property
    def is_foreman(self) -> bool:
        return bool(self.user and self.user.is_foreman)

    @property
    def is_super_admin(self) -> bool:
        return bool(self.user and self.user.is_super_admin)


def visible_projects(user: User | None, projects: Iterable[Project]) -> list[Project]:
    """Foremen only see their allow-list; everyone else sees all."""
    projects = list(projects)
    if user is None or not user.is_foreman or user.project_ids is None:
        return projects
    allowed = set(user.project_ids)
    return [p for p in projects if p.id in allowed]
