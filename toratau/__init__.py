# toratau/__init__.py
from __future__ import annotations

import logging
from typing import Any, Mapping

from flask import Flask, flash, redirect, render_template, request, url_for
from flask_login import current_user

from .settings import Config
from .extensions import login_manager, limiter


def create_app(config: Mapping[str, Any] | None = None, http: Any = None) -> Flask:
    """
    `http` is the transport handed to every ApiClient (a requests.Session
    by default); tests pass a fake with the same `request()` signature.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")), logging.INFO))

    # ======================
    # Backend transport
    # ======================
    import requests
    from .services import HTTP_EXTENSION

    app.extensions[HTTP_EXTENSION] = http if http is not None else requests.Session()

    # ======================
    # Initialize Extensions
    # ======================
    login_manager.init_app(app)
    limiter.init_app(app)

    # ======================
    # Template filters / globals
    # ======================
    from .constants import template_constants
    from .utils.format import format_date, format_datetime, format_money

    app.jinja_env.filters["money"] = format_money
    app.jinja_env.filters["date"] = format_date
    app.jinja_env.filters["datetime"] = format_datetime

    # ======================
    # Navigation shell (header + sidebar)
    # ======================
    from .navigation import PROJECT_NAV_ITEMS, remember_object
    from .services import get_branding, get_store, get_subscription

    @app.context_processor
    def inject_shell():
        ctx = template_constants()
        if not getattr(current_user, "is_authenticated", False):
            return ctx

        ctx["brand_name"] = get_branding().name
        if current_user.is_super_admin:
            return ctx

        subscription = get_subscription()
        ctx.update(
            current_object_id=remember_object(get_store(), request.path),
            project_nav=PROJECT_NAV_ITEMS,
            subscription=subscription.load(),
            subscription_warning=subscription.show_warning,
            remaining_days=subscription.remaining_days,
            subscription_state=subscription.state,
        )
        return ctx

    # ======================
    # Register Blueprints
    # ======================
    from .routes import main
    from .auth import auth
    from .admin import admin_bp

    app.register_blueprint(main)
    app.register_blueprint(auth)
    app.register_blueprint(admin_bp)

    # ======================
    # Expired subscription: lock the portal
    # ======================
    @app.before_request
    def enforce_active_subscription():
        if not getattr(current_user, "is_authenticated", False):
            return None

        if current_user.is_super_admin:
            return None

        endpoint = request.endpoint or ""
        if endpoint.startswith("static"):
            return None

        allowed_endpoints = {
            "main.billing",
            "auth.logout",
            "auth.login",
        }
        if endpoint in allowed_endpoints:
            return None

        if get_subscription().access_allowed:
            return None

        app.logger.info("Portal locked for %s: subscription expired", current_user.username)
        return redirect(url_for("main.billing"))

    # ======================
    # Session expiry (401 from the backend)
    # ======================
    from .api import SessionExpired

    @app.errorhandler(SessionExpired)
    def session_expired(e):
        get_store().clear_auth()
        app.logger.warning("Backend rejected session token on %s", request.path)
        flash(e.message, "warning")
        return redirect(url_for("auth.login"))

    # ======================
    # Rate limit error handler
    # ======================
    @app.errorhandler(429)
    def ratelimit_handler(e):
        return "Too many requests. Please try again later.", 429

    # ======================
    # Forbidden handler
    # ======================
    @app.errorhandler(403)
    def forbidden(e):
        return render_template("403.html"), 403

    # ======================
    # Not found handler
    # ======================
    @app.errorhandler(404)
    def not_found(e):
        return render_template("404.html"), 404

    return app
