# toratau/auth.py
from __future__ import annotations

from datetime import datetime
from urllib.parse import urlparse, urljoin

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required

from .api import ApiError
from .extensions import limiter, login_manager
from .services import get_auth

auth = Blueprint("auth", __name__)

MIN_PASSWORD_LENGTH = 4


# =========================================================
# Flask-Login request loader
# =========================================================
@login_manager.request_loader
def load_user_from_session(_request):
    """
    Session restoration: a stored token is checked against GET /auth/me.
    Any failure clears token and user, so the request is anonymous.
    """
    service = get_auth()
    had_token = bool(service.token)
    user = service.restore()
    if had_token and user is None:
        current_app.logger.warning("Stored session token rejected; logged out.")
    return user


# =========================================================
# Helpers
# =========================================================
def _is_safe_next(target: str) -> bool:
    """
    Allow only same-host redirects AND block redirect loops into /login or /logout.
    """
    if not target:
        return False

    blocked_prefixes = ("/login", "/logout")
    if target.startswith(blocked_prefixes):
        return False

    ref = urlparse(request.host_url)
    test = urlparse(urljoin(request.host_url, target))
    return test.scheme in ("http", "https") and ref.netloc == test.netloc


def _home_for(user) -> str:
    if getattr(user, "is_super_admin", False):
        return url_for("admin.portals_list")
    return url_for("main.dashboard")


def _next_or_home(user) -> str:
    nxt = request.args.get("next") or request.form.get("next") or ""
    if nxt and _is_safe_next(nxt):
        return nxt
    return _home_for(user)


def _year() -> int:
    return datetime.utcnow().year


# =========================================================
# Login / Register / Logout
# =========================================================
@auth.route("/login", methods=["GET", "POST"])
@limiter.limit("5 per minute", methods=["POST"])
def login():
    if getattr(current_user, "is_authenticated", False):
        return redirect(_home_for(current_user))

    next_url = request.args.get("next") or request.form.get("next") or ""

    if request.method == "POST":
        username = (request.form.get("username") or "").strip()
        password = request.form.get("password") or ""

        if not username or not password:
            flash("Username and password are required.", "danger")
            return render_template("login.html", next=next_url, username=username, current_year=_year())

        try:
            user = get_auth().login(username, password)
        except ApiError as exc:
            flash(exc.message, "danger")
            return render_template("login.html", next=next_url, username=username, current_year=_year())

        current_app.logger.info("User %s logged in", user.username)
        return redirect(_next_or_home(user))

    return render_template("login.html", next=next_url, username="", current_year=_year())


@auth.route("/register", methods=["GET", "POST"])
def register():
    if getattr(current_user, "is_authenticated", False):
        return redirect(_home_for(current_user))

    fields = {
        "full_name": (request.form.get("full_name") or "").strip(),
        "email": (request.form.get("email") or "").strip().lower(),
        "username": (request.form.get("username") or "").strip(),
    }

    if request.method == "POST":
        password = request.form.get("password") or ""
        confirm = request.form.get("confirm_password") or ""

        error = None
        if not all(fields.values()) or not password:
            error = "All fields are required."
        elif "@" not in fields["email"]:
            error = "Email is not valid."
        elif len(password) < MIN_PASSWORD_LENGTH:
            error = f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        elif password != confirm:
            error = "Passwords do not match."

        if error:
            flash(error, "danger")
            return render_template("register.html", form=fields, current_year=_year())

        try:
            user = get_auth().register(dict(fields, password=password))
        except ApiError as exc:
            flash(exc.message, "danger")
            return render_template("register.html", form=fields, current_year=_year())

        current_app.logger.info("Portal registered by %s", user.username)
        flash("Welcome! Your portal is ready.", "success")
        return redirect(_home_for(user))

    return render_template("register.html", form=fields, current_year=_year())


@auth.route("/logout")
def logout():
    """
    Not login_required: an expired session must still be able to log out.
    No server-side revocation; the stored token is simply dropped.
    """
    service = get_auth()
    if service.token:
        current_app.logger.info("User logged out")
    service.logout()
    flash("You have been logged out.", "success")
    return redirect(url_for("auth.login"))


# =========================================================
# Profile / Change password
# =========================================================
@auth.route("/profile", methods=["GET", "POST"])
@login_required
def profile():
    full_name = current_user.full_name

    if request.method == "POST":
        full_name = (request.form.get("full_name") or "").strip()
        if not full_name:
            flash("Full name is required.", "danger")
            return render_template("auth/profile.html", full_name=full_name)

        try:
            get_auth().update_profile(full_name)
        except ApiError as exc:
            flash(exc.message, "danger")
            return render_template("auth/profile.html", full_name=full_name)

        flash("Profile updated.", "success")
        return redirect(url_for("auth.profile"))

    return render_template("auth/profile.html", full_name=full_name)


@auth.route("/change-password", methods=["GET", "POST"])
@login_required
def change_password():
    if request.method == "POST":
        current_password = (request.form.get("current_password") or "").strip()
        new_password = (request.form.get("new_password") or "").strip()
        confirm_password = (request.form.get("confirm_password") or "").strip()

        if not current_password or not new_password or not confirm_password:
            flash("All fields are required.", "danger")
            return render_template("auth/change_password.html")

        if len(new_password) < MIN_PASSWORD_LENGTH:
            flash(f"New password must be at least {MIN_PASSWORD_LENGTH} characters.", "danger")
            return render_template("auth/change_password.html")

        if new_password != confirm_password:
            flash("New password and confirmation do not match.", "danger")
            return render_template("auth/change_password.html")

        if new_password == current_password:
            flash("New password must be different from the current password.", "danger")
            return render_template("auth/change_password.html")

        try:
            get_auth().change_password(current_password, new_password)
        except ApiError as exc:
            flash(exc.message, "danger")
            return render_template("auth/change_password.html")

        flash("Password updated successfully.", "success")
        return redirect(url_for("auth.profile"))

    return render_template("auth/change_password.html")
