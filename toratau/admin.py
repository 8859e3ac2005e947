# toratau/admin.py
"""Super-admin console: tenant portals."""

from __future__ import annotations

from flask import Blueprint, abort, current_app, flash, redirect, render_template, request, url_for
from flask_login import current_user

from .api import ApiError
from .api import portals as portals_api
from .billing import is_paid, remaining_days
from .forms import PortalForm
from .listing import (
    ALL,
    PORTAL_DEFAULT_SORT,
    PORTAL_SORT_KEYS,
    SortState,
    filter_portals,
    portal_summary,
    sort_portals,
)
from .models import PORTAL_PLANS, PORTAL_STATUSES
from .services import get_api
from .utils.guards import super_admin_required

admin_bp = Blueprint("admin", __name__, url_prefix="/super-admin")

PAID_FILTERS = (ALL, "paid", "unpaid")


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def _clean_choice(value: str | None, allowed) -> str:
    value = (value or "").strip()
    return value if value in allowed else ALL


def _list_filters() -> dict:
    return {
        "search": (request.args.get("q") or "").strip(),
        "status": _clean_choice(request.args.get("status"), PORTAL_STATUSES),
        "plan": _clean_choice(request.args.get("plan"), PORTAL_PLANS),
        "paid": _clean_choice(request.args.get("paid"), PAID_FILTERS),
    }


def _back_to_list() -> str:
    """Return to the list keeping the filters the action was issued from."""
    nxt = request.form.get("next") or ""
    if nxt.startswith(url_for("admin.portals_list")):
        return nxt
    return url_for("admin.portals_list")


def _render_form(state: dict, portal_id: str | None = None):
    return render_template(
        "admin/portal_form.html",
        form=state,
        portal_id=portal_id,
        plans=PORTAL_PLANS,
        statuses=("active", "blocked"),
    )


# -------------------------------------------------------------------
# List / filter / sort
# GET /super-admin/portals
# -------------------------------------------------------------------
@admin_bp.route("/", methods=["GET"])
@super_admin_required
def dashboard():
    return redirect(url_for("admin.portals_list"))


@admin_bp.route("/portals", methods=["GET"])
@super_admin_required
def portals_list():
    filters = _list_filters()
    sort = SortState.from_args(request.args, PORTAL_SORT_KEYS, PORTAL_DEFAULT_SORT)

    portals = []
    try:
        portals = portals_api.list_portals(get_api())
    except ApiError as exc:
        current_app.logger.exception("Load portals failed")
        flash(exc.message, "danger")

    rows = sort_portals(filter_portals(portals, **filters), sort)

    return render_template(
        "admin/portals_list.html",
        portals=rows,
        summary=portal_summary(portals),
        filters=filters,
        sort=sort,
        plans=PORTAL_PLANS,
        statuses=PORTAL_STATUSES,
        paid_filters=PAID_FILTERS,
        is_paid=is_paid,
    )


# -------------------------------------------------------------------
# Create
# -------------------------------------------------------------------
@admin_bp.route("/portals/new", methods=["GET", "POST"])
@super_admin_required
def portals_new():
    if request.method == "GET":
        return _render_form(PortalForm.defaults())

    state = PortalForm.from_request(request.form)
    error = PortalForm.validate(state, creating=True)
    if error:
        flash(error, "danger")
        return _render_form(state)

    try:
        portal = portals_api.create_portal(get_api(), PortalForm.payload(state, creating=True))
    except ApiError as exc:
        flash(exc.message, "danger")
        return _render_form(state)

    current_app.logger.info("Portal %s created by %s", portal.id, current_user.username)
    flash("Portal created.", "success")
    return redirect(url_for("admin.portals_list"))


# -------------------------------------------------------------------
# Details / edit
# -------------------------------------------------------------------
def _get_portal_or_404(portal_id: str):
    try:
        return portals_api.get_portal(get_api(), portal_id)
    except ApiError as exc:
        if exc.status == 404:
            abort(404)
        flash(exc.message, "danger")
        return None


@admin_bp.route("/portals/<portal_id>", methods=["GET"])
@super_admin_required
def portal_detail(portal_id: str):
    portal = _get_portal_or_404(portal_id)
    if portal is None:
        return redirect(url_for("admin.portals_list"))

    return render_template(
        "admin/portal_detail.html",
        portal=portal,
        paid=is_paid(portal.subscription),
        days_left=remaining_days(portal.subscription.paid_until),
    )


@admin_bp.route("/portals/<portal_id>/edit", methods=["GET", "POST"])
@super_admin_required
def portal_edit(portal_id: str):
    if request.method == "GET":
        portal = _get_portal_or_404(portal_id)
        if portal is None:
            return redirect(url_for("admin.portals_list"))
        return _render_form(PortalForm.from_record(portal), portal_id)

    state = PortalForm.from_request(request.form)
    error = PortalForm.validate(state)
    if error:
        flash(error, "danger")
        return _render_form(state, portal_id)

    try:
        portals_api.update_portal(get_api(), portal_id, PortalForm.payload(state))
    except ApiError as exc:
        flash(exc.message, "danger")
        return _render_form(state, portal_id)

    flash("Portal saved.", "success")
    return redirect(url_for("admin.portal_detail", portal_id=portal_id))


# -------------------------------------------------------------------
# Block / unblock / delete
# Every action reloads the whole list afterwards (redirect).
# -------------------------------------------------------------------
@admin_bp.route("/portals/<portal_id>/block", methods=["POST"])
@super_admin_required
def portal_block(portal_id: str):
    try:
        portals_api.block_portal(get_api(), portal_id)
        current_app.logger.info("Portal %s blocked by %s", portal_id, current_user.username)
        flash("Portal blocked.", "success")
    except ApiError as exc:
        flash(exc.message, "danger")
    return redirect(_back_to_list())


@admin_bp.route("/portals/<portal_id>/unblock", methods=["POST"])
@super_admin_required
def portal_unblock(portal_id: str):
    try:
        portals_api.unblock_portal(get_api(), portal_id)
        current_app.logger.info("Portal %s unblocked by %s", portal_id, current_user.username)
        flash("Portal unblocked.", "success")
    except ApiError as exc:
        flash(exc.message, "danger")
    return redirect(_back_to_list())


@admin_bp.route("/portals/<portal_id>/delete", methods=["GET", "POST"])
@super_admin_required
def portal_delete(portal_id: str):
    if request.method == "GET":
        return render_template(
            "confirm.html",
            title="Delete portal?",
            message="The portal will be removed from the system completely. This cannot be undone.",
            action=url_for("admin.portal_delete", portal_id=portal_id),
            cancel=url_for("admin.portals_list"),
            danger=True,
        )

    try:
        portals_api.delete_portal(get_api(), portal_id)
    except ApiError as exc:
        current_app.logger.exception("Delete portal %s failed", portal_id)
        flash(exc.message, "danger")
        return redirect(url_for("admin.portals_list"))

    current_app.logger.info("Portal %s deleted by %s", portal_id, current_user.username)
    flash("Portal deleted.", "success")
    return redirect(url_for("admin.portals_list"))
