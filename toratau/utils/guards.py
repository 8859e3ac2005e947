# toratau/utils/guards.py

from __future__ import annotations

from functools import wraps
from typing import Callable, Any

from flask import abort, current_app, request
from flask_login import login_required, current_user

# These only hide screens; the backend enforces the real permissions.
ADMIN_ROLES = {"admin"}
SUPER_ADMIN_ROLES = {"superAdmin"}


def _deny(role: str | None) -> None:
    current_app.logger.warning(
        "Role %r denied access to %s", role, request.endpoint or request.path
    )
    abort(403)


def admin_required(view: Callable[..., Any]) -> Callable[..., Any]:
    """
    Allow only portal administrators.
    Returns 403 for all other logged-in roles.
    """
    @wraps(view)
    @login_required
    def wrapped(*args, **kwargs):
        role = getattr(current_user, "role", None)
        if role not in ADMIN_ROLES:
            _deny(role)
        return view(*args, **kwargs)

    return wrapped


def super_admin_required(view: Callable[..., Any]) -> Callable[..., Any]:
    """Portal (tenant) management console."""
    @wraps(view)
    @login_required
    def wrapped(*args, **kwargs):
        role = getattr(current_user, "role", None)
        if role not in SUPER_ADMIN_ROLES:
            _deny(role)
        return view(*args, **kwargs)

    return wrapped


def role_required(*allowed_roles: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Generic role gate:
        @role_required("admin", "foreman")
        def view(): ...
    """
    def decorator(view: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view)
        @login_required
        def wrapped(*args, **kwargs):
            role = getattr(current_user, "role", None)
            if role not in allowed_roles:
                _deny(role)
            return view(*args, **kwargs)
        return wrapped
    return decorator
