# toratau/routes.py
from __future__ import annotations

from typing import Any, Callable

from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_login import current_user

from .api import ApiError
from .api import cash_in as cash_in_api
from .api import crews as crews_api
from .api import employees as employees_api
from .api import expenses as expenses_api
from .api import payouts as payouts_api
from .api import projects as projects_api
from .api import reports as reports_api
from .billing import PLAN_MONTHLY_PRICES
from .forms import CashInForm, CrewForm, EmployeeForm, ExpenseForm, PayoutForm, ProjectForm, RecordForm
from .listing import (
    EMPLOYEE_DEFAULT_SORT,
    EMPLOYEE_SORT_KEYS,
    SortState,
    apply_filters,
    crew_search,
    employee_search,
    group_projects,
    sort_items,
)
from .models import PROJECT_STATUSES
from .services import get_api, get_branding, get_subscription
from .session import visible_projects
from .utils.guards import admin_required, role_required

main = Blueprint("main", __name__)

staff_required = role_required("admin", "foreman")


# =========================================================
# Helpers
# =========================================================
def _load_or_404(loader: Callable[..., Any], *args: Any) -> Any:
    """Fetch one record; backend 404 -> our 404, anything else -> flash + None."""
    try:
        return loader(get_api(), *args)
    except ApiError as exc:
        if exc.status == 404:
            abort(404)
        flash(exc.message, "danger")
        return None


def _load_owned(loader: Callable[..., Any], project_id: int, record_id: int) -> Any:
    """Like _load_or_404, but a record of another project is a 404 too."""
    record = _load_or_404(loader, record_id)
    if record is not None and record.project_id != project_id:
        current_app.logger.warning(
            "Record %s belongs to project %s, not %s", record_id, record.project_id, project_id
        )
        abort(404)
    return record


def _flash_api_error(exc: ApiError, action: str) -> None:
    if exc.status is None or exc.status >= 500:
        current_app.logger.exception("%s failed", action)
    flash(exc.message, "danger")


def _sum(rows: list, attr: str = "amount") -> float:
    return sum(getattr(r, attr) or 0 for r in rows)


# =========================================================
# Dashboard / project selector
# =========================================================
@main.route("/", methods=["GET"])
@staff_required
def dashboard():
    q = (request.args.get("q") or "").strip()
    archive_open = request.args.get("archive") == "1"

    projects = []
    try:
        projects = visible_projects(current_user, projects_api.list_projects(get_api()))
    except ApiError as exc:
        _flash_api_error(exc, "Load projects")

    groups = group_projects(projects, q, archive_open)
    subscription = get_subscription()

    api = get_api()
    reports = {p.id: _report_or_none(api, p.id) for p in groups.active}

    return render_template(
        "projects/list.html",
        groups=groups,
        reports=reports,
        q=q,
        can_add_project=subscription.can_add_project(len(projects)),
    )


@main.route("/projects", methods=["GET"])
@staff_required
def projects_list():
    return redirect(url_for("main.dashboard", **request.args))


# =========================================================
# Projects
# =========================================================
def _render_project_form(state: dict, project_id: int | None = None):
    return render_template(
        "projects/form.html",
        form=state,
        project_id=project_id,
        statuses=PROJECT_STATUSES,
    )


@main.route("/projects/new", methods=["GET", "POST"])
@admin_required
def project_new():
    api = get_api()
    subscription = get_subscription()

    try:
        project_count = len(projects_api.list_projects(api))
    except ApiError as exc:
        _flash_api_error(exc, "Load projects")
        return redirect(url_for("main.dashboard"))

    if not subscription.can_add_project(project_count):
        return render_template(
            "projects/upgrade.html",
            limit=subscription.project_limit(),
            plan=subscription.subscription.plan if subscription.subscription else None,
        )

    if request.method == "GET":
        return _render_project_form(ProjectForm.defaults())

    state = ProjectForm.from_request(request.form)
    error = ProjectForm.validate(state)
    if error:
        flash(error, "danger")
        return _render_project_form(state)

    try:
        created = projects_api.create_project(api, ProjectForm.payload(state))
    except ApiError as exc:
        _flash_api_error(exc, "Create project")
        return _render_project_form(state)

    flash("Project created.", "success")
    return redirect(url_for("main.project_detail", project_id=created.id))


def _report_or_none(api, project_id: int):
    """The report is optional on every page that shows it."""
    try:
        return reports_api.get_project_report(api, project_id)
    except ApiError as exc:
        current_app.logger.info("No report for project %s: %s", project_id, exc.message)
        return None


@main.route("/projects/<int:project_id>", methods=["GET"])
@staff_required
def project_detail(project_id: int):
    project = _load_or_404(projects_api.get_project, project_id)
    if project is None:
        return redirect(url_for("main.dashboard"))

    api = get_api()
    report = _report_or_none(api, project_id)
    if report is not None:
        totals = {
            "cash_in": report.total_cash_in,
            "expenses": report.total_expenses,
            "payouts": report.total_paid,
            "balance": report.balance,
        }
        return render_template("projects/detail.html", project=project, totals=totals, report=report)

    totals = {"cash_in": 0.0, "expenses": 0.0, "payouts": 0.0}
    try:
        totals["cash_in"] = _sum(cash_in_api.list_cash_ins(api, project_id))
        totals["expenses"] = _sum(expenses_api.list_expenses(api, project_id))
        totals["payouts"] = _sum(
            [p for p in payouts_api.list_payouts(api, project_id) if p.status == "approved"]
        )
    except ApiError as exc:
        _flash_api_error(exc, "Load project totals")

    totals["balance"] = totals["cash_in"] - totals["expenses"] - totals["payouts"]
    return render_template("projects/detail.html", project=project, totals=totals, report=None)


@main.route("/projects/<int:project_id>/edit", methods=["GET", "POST"])
@admin_required
def project_edit(project_id: int):
    if request.method == "GET":
        project = _load_or_404(projects_api.get_project, project_id)
        if project is None:
            return redirect(url_for("main.dashboard"))
        return _render_project_form(ProjectForm.from_record(project), project_id)

    state = ProjectForm.from_request(request.form)
    error = ProjectForm.validate(state)
    if error:
        flash(error, "danger")
        return _render_project_form(state, project_id)

    try:
        projects_api.update_project(get_api(), project_id, ProjectForm.payload(state))
    except ApiError as exc:
        _flash_api_error(exc, "Update project")
        return _render_project_form(state, project_id)

    flash("Project saved.", "success")
    return redirect(url_for("main.project_detail", project_id=project_id))


@main.route("/projects/<int:project_id>/delete", methods=["GET", "POST"])
@admin_required
def project_delete(project_id: int):
    if request.method == "GET":
        project = _load_or_404(projects_api.get_project, project_id)
        if project is None:
            return redirect(url_for("main.dashboard"))
        return render_template(
            "confirm.html",
            title="Delete project?",
            message=f"“{project.name}” and all its records will be deleted. This cannot be undone.",
            action=url_for("main.project_delete", project_id=project_id),
            cancel=url_for("main.project_detail", project_id=project_id),
        )

    try:
        projects_api.delete_project(get_api(), project_id)
    except ApiError as exc:
        _flash_api_error(exc, "Delete project")
        return redirect(url_for("main.project_detail", project_id=project_id))

    current_app.logger.info("Project %s deleted by %s", project_id, current_user.username)
    flash("Project deleted.", "success")
    return redirect(url_for("main.dashboard"))


# =========================================================
# Project money records (payments, expenses, payouts)
# =========================================================
class RecordKind:
    def __init__(
        self,
        key: str,
        title: str,
        form: type[RecordForm],
        list_fn: Callable[..., list],
        get_fn: Callable[..., Any],
        create_fn: Callable[..., Any],
        update_fn: Callable[..., Any],
        delete_fn: Callable[..., None],
    ):
        self.key = key
        self.title = title
        self.form = form
        self.list_fn = list_fn
        self.get_fn = get_fn
        self.create_fn = create_fn
        self.update_fn = update_fn
        self.delete_fn = delete_fn

    @property
    def list_endpoint(self) -> str:
        return f"main.{self.key}_list"


CASH_IN = RecordKind(
    "cash_in", "Payment", CashInForm,
    cash_in_api.list_cash_ins, cash_in_api.get_cash_in, cash_in_api.create_cash_in,
    cash_in_api.update_cash_in, cash_in_api.delete_cash_in,
)
EXPENSES = RecordKind(
    "expenses", "Expense", ExpenseForm,
    expenses_api.list_expenses, expenses_api.get_expense, expenses_api.create_expense,
    expenses_api.update_expense, expenses_api.delete_expense,
)
PAYOUTS = RecordKind(
    "payouts", "Payout", PayoutForm,
    payouts_api.list_payouts, payouts_api.get_payout, payouts_api.create_payout,
    payouts_api.update_payout, payouts_api.delete_payout,
)


def _records_list(kind: RecordKind, project_id: int):
    project = _load_or_404(projects_api.get_project, project_id)
    if project is None:
        return redirect(url_for("main.dashboard"))

    rows = []
    try:
        rows = kind.list_fn(get_api(), project_id)
    except ApiError as exc:
        _flash_api_error(exc, f"Load {kind.key}")

    rows = sort_items(rows, lambda r: r.date, "desc")
    return render_template(
        f"records/{kind.key}_list.html",
        kind=kind,
        project=project,
        rows=rows,
        total=_sum(rows),
    )


def _record_form(kind: RecordKind, project_id: int, record_id: int | None):
    creating = record_id is None
    extra: dict[str, Any] = {}

    if kind is PAYOUTS:
        try:
            extra["crews"] = crews_api.list_crews(get_api(), active_only=True)
        except ApiError as exc:
            _flash_api_error(exc, "Load crews")
            extra["crews"] = []

    def render(state: dict):
        return render_template(
            f"records/{kind.key}_form.html",
            kind=kind,
            form=state,
            project_id=project_id,
            record_id=record_id,
            **extra,
        )

    if request.method == "GET":
        if creating:
            state = kind.form.defaults(project_id=project_id)
            if kind is PAYOUTS and extra["crews"]:
                state["crew_id"] = extra["crews"][0].id
            return render(state)
        record = _load_owned(kind.get_fn, project_id, record_id)
        if record is None:
            return redirect(url_for(kind.list_endpoint, project_id=project_id))
        return render(kind.form.from_record(record))

    if not creating and _load_owned(kind.get_fn, project_id, record_id) is None:
        return redirect(url_for(kind.list_endpoint, project_id=project_id))

    state = kind.form.from_request(request.form)
    state["project_id"] = project_id
    error = kind.form.validate(state)
    if error:
        flash(error, "danger")
        return render(state)

    api = get_api()
    try:
        if creating:
            kind.create_fn(api, kind.form.payload(state))
        else:
            kind.update_fn(api, record_id, kind.form.payload(state))
    except ApiError as exc:
        _flash_api_error(exc, f"Save {kind.key}")
        return render(state)

    flash(f"{kind.title} saved.", "success")
    return redirect(url_for(kind.list_endpoint, project_id=project_id))


def _record_delete(kind: RecordKind, project_id: int, record_id: int):
    back = url_for(kind.list_endpoint, project_id=project_id)

    if _load_owned(kind.get_fn, project_id, record_id) is None:
        return redirect(back)

    if request.method == "GET":
        return render_template(
            "confirm.html",
            title=f"Delete {kind.title.lower()}?",
            message="This record will be deleted. This cannot be undone.",
            action=request.path,
            cancel=back,
        )

    try:
        kind.delete_fn(get_api(), record_id)
    except ApiError as exc:
        _flash_api_error(exc, f"Delete {kind.key}")
        return redirect(back)

    flash(f"{kind.title} deleted.", "success")
    return redirect(back)


# ---- payments (cash-in) ----
@main.route("/projects/<int:project_id>/payments", methods=["GET"])
@staff_required
def cash_in_list(project_id: int):
    return _records_list(CASH_IN, project_id)


@main.route("/projects/<int:project_id>/payments/new", methods=["GET", "POST"])
@staff_required
def cash_in_new(project_id: int):
    return _record_form(CASH_IN, project_id, None)


@main.route("/projects/<int:project_id>/payments/<int:record_id>/edit", methods=["GET", "POST"])
@staff_required
def cash_in_edit(project_id: int, record_id: int):
    return _record_form(CASH_IN, project_id, record_id)


@main.route("/projects/<int:project_id>/payments/<int:record_id>/delete", methods=["GET", "POST"])
@admin_required
def cash_in_delete(project_id: int, record_id: int):
    return _record_delete(CASH_IN, project_id, record_id)


# ---- expenses ----
@main.route("/projects/<int:project_id>/expenses", methods=["GET"])
@staff_required
def expenses_list(project_id: int):
    return _records_list(EXPENSES, project_id)


@main.route("/projects/<int:project_id>/expenses/new", methods=["GET", "POST"])
@staff_required
def expenses_new(project_id: int):
    return _record_form(EXPENSES, project_id, None)


@main.route("/projects/<int:project_id>/expenses/<int:record_id>/edit", methods=["GET", "POST"])
@staff_required
def expenses_edit(project_id: int, record_id: int):
    return _record_form(EXPENSES, project_id, record_id)


@main.route("/projects/<int:project_id>/expenses/<int:record_id>/delete", methods=["GET", "POST"])
@admin_required
def expenses_delete(project_id: int, record_id: int):
    return _record_delete(EXPENSES, project_id, record_id)


# ---- payouts ----
@main.route("/projects/<int:project_id>/payouts", methods=["GET"])
@staff_required
def payouts_list(project_id: int):
    return _records_list(PAYOUTS, project_id)


@main.route("/projects/<int:project_id>/payouts/new", methods=["GET", "POST"])
@staff_required
def payouts_new(project_id: int):
    return _record_form(PAYOUTS, project_id, None)


@main.route("/projects/<int:project_id>/payouts/<int:record_id>/edit", methods=["GET", "POST"])
@staff_required
def payouts_edit(project_id: int, record_id: int):
    return _record_form(PAYOUTS, project_id, record_id)


@main.route("/projects/<int:project_id>/payouts/<int:record_id>/delete", methods=["GET", "POST"])
@admin_required
def payouts_delete(project_id: int, record_id: int):
    return _record_delete(PAYOUTS, project_id, record_id)


@main.route("/projects/<int:project_id>/payouts/<int:record_id>/approve", methods=["POST"])
@admin_required
def payouts_approve(project_id: int, record_id: int):
    if _load_owned(payouts_api.get_payout, project_id, record_id) is None:
        return redirect(url_for("main.payouts_list", project_id=project_id))
    try:
        payouts_api.approve_payout(get_api(), record_id)
        flash("Payout approved.", "success")
    except ApiError as exc:
        _flash_api_error(exc, "Approve payout")
    return redirect(url_for("main.payouts_list", project_id=project_id))


@main.route("/projects/<int:project_id>/payouts/<int:record_id>/cancel", methods=["POST"])
@staff_required
def payouts_cancel(project_id: int, record_id: int):
    if _load_owned(payouts_api.get_payout, project_id, record_id) is None:
        return redirect(url_for("main.payouts_list", project_id=project_id))
    try:
        payouts_api.cancel_payout(get_api(), record_id)
        flash("Payout cancelled.", "success")
    except ApiError as exc:
        _flash_api_error(exc, "Cancel payout")
    return redirect(url_for("main.payouts_list", project_id=project_id))


# =========================================================
# Employees
# =========================================================
@main.route("/employees", methods=["GET"])
@admin_required
def employees_list():
    q = (request.args.get("q") or "").strip()
    state = SortState.from_args(request.args, EMPLOYEE_SORT_KEYS, EMPLOYEE_DEFAULT_SORT)

    employees = []
    try:
        employees = employees_api.list_employees(get_api())
    except ApiError as exc:
        _flash_api_error(exc, "Load employees")

    rows = sort_items(
        apply_filters(employees, employee_search(q)),
        EMPLOYEE_SORT_KEYS[state.field],
        state.direction,
    )
    return render_template("employees/list.html", employees=rows, q=q, sort=state)


def _render_employee_form(state: dict, employee_id: int | None = None):
    projects = []
    try:
        projects = projects_api.list_projects(get_api())
    except ApiError as exc:
        _flash_api_error(exc, "Load projects")
    return render_template(
        "employees/form.html",
        form=state,
        employee_id=employee_id,
        projects=projects,
    )


@main.route("/employees/new", methods=["GET", "POST"])
@admin_required
def employee_new():
    if request.method == "GET":
        return _render_employee_form(EmployeeForm.defaults())

    state = EmployeeForm.from_request(request.form)
    error = EmployeeForm.validate(state, creating=True)
    if error:
        flash(error, "danger")
        return _render_employee_form(state)

    try:
        employees_api.create_employee(get_api(), EmployeeForm.payload(state, creating=True))
    except ApiError as exc:
        _flash_api_error(exc, "Create employee")
        return _render_employee_form(state)

    flash("Employee created.", "success")
    return redirect(url_for("main.employees_list"))


@main.route("/employees/<int:employee_id>/edit", methods=["GET", "POST"])
@admin_required
def employee_edit(employee_id: int):
    if request.method == "GET":
        employee = _load_or_404(employees_api.get_employee, employee_id)
        if employee is None:
            return redirect(url_for("main.employees_list"))
        return _render_employee_form(EmployeeForm.from_record(employee), employee_id)

    state = EmployeeForm.from_request(request.form)
    error = EmployeeForm.validate(state)
    if error:
        flash(error, "danger")
        return _render_employee_form(state, employee_id)

    try:
        employees_api.update_employee(get_api(), employee_id, EmployeeForm.payload(state))
    except ApiError as exc:
        _flash_api_error(exc, "Update employee")
        return _render_employee_form(state, employee_id)

    flash("Employee saved.", "success")
    return redirect(url_for("main.employees_list"))


@main.route("/employees/<int:employee_id>/delete", methods=["GET", "POST"])
@admin_required
def employee_delete(employee_id: int):
    back = url_for("main.employees_list")

    if request.method == "GET":
        return render_template(
            "confirm.html",
            title="Delete employee?",
            message="The employee will lose access to the portal.",
            action=url_for("main.employee_delete", employee_id=employee_id),
            cancel=back,
        )

    try:
        employees_api.delete_employee(get_api(), employee_id)
    except ApiError as exc:
        _flash_api_error(exc, "Delete employee")
        return redirect(back)

    flash("Employee deleted.", "success")
    return redirect(back)


# =========================================================
# Crews (contractor contacts)
# =========================================================
@main.route("/crews", methods=["GET"])
@admin_required
def crews_list():
    q = (request.args.get("q") or "").strip()

    crews = []
    try:
        crews = crews_api.list_crews(get_api())
    except ApiError as exc:
        _flash_api_error(exc, "Load crews")

    rows = sort_items(apply_filters(crews, crew_search(q)), lambda c: c.name)
    return render_template("crews/list.html", crews=rows, q=q)


def _render_crew_form(state: dict, crew_id: int | None = None):
    return render_template("crews/form.html", form=state, crew_id=crew_id)


@main.route("/crews/new", methods=["GET", "POST"])
@admin_required
def crew_new():
    if request.method == "GET":
        return _render_crew_form(CrewForm.defaults())

    state = CrewForm.from_request(request.form)
    error = CrewForm.validate(state)
    if error:
        flash(error, "danger")
        return _render_crew_form(state)

    try:
        crews_api.create_crew(get_api(), CrewForm.payload(state))
    except ApiError as exc:
        _flash_api_error(exc, "Create crew")
        return _render_crew_form(state)

    flash("Crew created.", "success")
    return redirect(url_for("main.crews_list"))


@main.route("/crews/<int:crew_id>/edit", methods=["GET", "POST"])
@admin_required
def crew_edit(crew_id: int):
    if request.method == "GET":
        crew = _load_or_404(crews_api.get_crew, crew_id)
        if crew is None:
            return redirect(url_for("main.crews_list"))
        return _render_crew_form(CrewForm.from_record(crew), crew_id)

    state = CrewForm.from_request(request.form)
    error = CrewForm.validate(state)
    if error:
        flash(error, "danger")
        return _render_crew_form(state, crew_id)

    try:
        crews_api.update_crew(get_api(), crew_id, CrewForm.payload(state))
    except ApiError as exc:
        _flash_api_error(exc, "Update crew")
        return _render_crew_form(state, crew_id)

    flash("Crew saved.", "success")
    return redirect(url_for("main.crews_list"))


@main.route("/crews/<int:crew_id>/delete", methods=["GET", "POST"])
@admin_required
def crew_delete(crew_id: int):
    back = url_for("main.crews_list")

    if request.method == "GET":
        crew = _load_or_404(crews_api.get_crew, crew_id)
        if crew is None:
            return redirect(back)
        return render_template(
            "confirm.html",
            title="Delete crew?",
            message=f"“{crew.name}” will be removed from the contact list.",
            action=url_for("main.crew_delete", crew_id=crew_id),
            cancel=back,
        )

    try:
        crews_api.delete_crew(get_api(), crew_id)
    except ApiError as exc:
        _flash_api_error(exc, "Delete crew")
        return redirect(back)

    current_app.logger.info("Crew %s deleted by %s", crew_id, current_user.username)
    flash("Crew deleted.", "success")
    return redirect(back)


# =========================================================
# Branding (tenant display name, local only)
# =========================================================
@main.route("/branding", methods=["POST"])
@admin_required
def branding():
    get_branding().commit(request.form.get("name"))

    nxt = request.form.get("next") or ""
    if nxt.startswith("/") and not nxt.startswith("//"):
        return redirect(nxt)
    return redirect(url_for("main.dashboard"))


# =========================================================
# Billing (the only page left open once the subscription lapses)
# =========================================================
@main.route("/billing", methods=["GET"])
@staff_required
def billing():
    subscription = get_subscription()
    return render_template(
        "billing/renew.html",
        subscription=subscription.load(),
        state=subscription.state,
        locked=not subscription.access_allowed,
        days_left=subscription.remaining_days,
        prices=PLAN_MONTHLY_PRICES,
        error=subscription.error,
    )
