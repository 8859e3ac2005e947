# toratau/services.py
"""
Request-scoped services.

create_app() stores the HTTP transport on the app; everything else is built
once per request from it and the session cookie, and kept on `flask.g`.
"""

from __future__ import annotations

from flask import current_app, g, session
from flask_login import current_user

from .api import ApiClient
from .billing import DEFAULT_PLAN_PROJECT_LIMITS, SubscriptionService
from .navigation import Branding
from .session import AuthService, SessionStore

HTTP_EXTENSION = "toratau.http"


def make_api_client(token: str | None) -> ApiClient:
    return ApiClient(
        current_app.config["API_BASE_URL"],
        token=token,
        http=current_app.extensions.get(HTTP_EXTENSION),
        timeout=current_app.config.get("API_TIMEOUT"),
    )


def get_store() -> SessionStore:
    if "store" not in g:
        g.store = SessionStore(session)
    return g.store


def get_auth() -> AuthService:
    if "auth" not in g:
        g.auth = AuthService(make_api_client, get_store())
    return g.auth


def get_api() -> ApiClient:
    return get_auth().api


def get_subscription() -> SubscriptionService:
    if "subscription" not in g:
        user = current_user._get_current_object() if current_user.is_authenticated else None
        g.subscription = SubscriptionService(
            get_api(),
            user,
            limits=current_app.config.get("PLAN_PROJECT_LIMITS") or DEFAULT_PLAN_PROJECT_LIMITS,
            warning_days=current_app.config.get("SUBSCRIPTION_WARNING_DAYS", 7),
        )
    return g.subscription


def get_branding() -> Branding:
    return Branding(get_store(), current_app.config.get("DEFAULT_LOGO"))
