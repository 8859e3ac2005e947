# toratau/forms.py
"""
Form state for create/edit pages.

Each form reads `request.form` into a plain dict ("state") with numbers
already coerced, so a re-rendered form after a failed save shows exactly
the values that were submitted. `payload()` turns the state into the JSON
body for the backend.
"""

from __future__ import annotations

from typing import Any, Mapping

from .models import CashIn, Crew, Employee, Expense, Payout, Portal, Project, ROLE_ADMIN
from .utils.format import to_input_date, today_iso

# field kinds
STR = "str"
TEXT = "text"
NUMBER = "number"
INT = "int"
DATE = "date"
OPTIONAL_DATE = "optional_date"
BOOL = "bool"


def to_number(raw: Any) -> float | int:
    """'12' -> 12, '12.5' -> 12.5, garbage -> 0."""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return raw
    text = (str(raw) if raw is not None else "").strip().replace(",", ".")
    if not text:
        return 0
    try:
        value = float(text)
    except ValueError:
        return 0
    return int(value) if value.is_integer() else value


def to_int(raw: Any) -> int:
    return int(to_number(raw))


class RecordForm:
    fields: dict[str, str] = {}
    required: tuple[str, ...] = ()
    labels: dict[str, str] = {}

    @classmethod
    def initial(cls) -> dict:
        """Values a blank create form starts with."""
        return {}

    @classmethod
    def defaults(cls, **overrides: Any) -> dict:
        state = {name: cls._empty(kind) for name, kind in cls.fields.items()}
        state.update(cls.initial())
        state.update(overrides)
        return state

    @staticmethod
    def _empty(kind: str) -> Any:
        if kind in (NUMBER, INT):
            return 0
        if kind == BOOL:
            return False
        return ""

    @classmethod
    def from_request(cls, form: Mapping[str, Any]) -> dict:
        state = {}
        for name, kind in cls.fields.items():
            raw = form.get(name)
            if kind == NUMBER:
                state[name] = to_number(raw)
            elif kind == INT:
                state[name] = to_int(raw)
            elif kind == BOOL:
                state[name] = raw in ("1", "on", "true", "yes", True)
            else:
                state[name] = (raw or "").strip()
        return state

    @classmethod
    def validate(cls, state: Mapping[str, Any]) -> str | None:
        for name in cls.required:
            if not state.get(name):
                label = cls.labels.get(name, name.replace("_", " ").capitalize())
                return f"{label} is required."
        return None

    @classmethod
    def payload(cls, state: Mapping[str, Any]) -> dict:
        body = {}
        for name, kind in cls.fields.items():
            value = state.get(name)
            if kind == OPTIONAL_DATE:
                value = value or None
            body[name] = value
        return body


# =========================================================
# Project
# =========================================================
class ProjectForm(RecordForm):
    fields = {
        "name": STR,
        "address": STR,
        "client": STR,
        "start_date": DATE,
        "end_date": OPTIONAL_DATE,
        "status": STR,
        "contract_amount": NUMBER,
        "planned_cost": NUMBER,
        "notes": TEXT,
    }
    required = ("name", "client")
    labels = {"name": "Project name", "client": "Client"}

    @classmethod
    def initial(cls) -> dict:
        return {"start_date": today_iso(), "status": "new"}

    @classmethod
    def from_record(cls, p: Project) -> dict:
        return {
            "name": p.name,
            "address": p.address,
            "client": p.client,
            "start_date": to_input_date(p.start_date),
            "end_date": to_input_date(p.end_date),
            "status": p.status,
            "contract_amount": p.contract_amount,
            "planned_cost": p.planned_cost,
            "notes": p.notes,
        }

    @classmethod
    def from_request(cls, form: Mapping[str, Any]) -> dict:
        state = super().from_request(form)
        # status is only editable on existing projects
        state["status"] = state["status"] or "new"
        return state


# =========================================================
# Cash-in / Expense / Payout
# =========================================================
class CashInForm(RecordForm):
    fields = {
        "project_id": INT,
        "date": DATE,
        "amount": NUMBER,
        "comment": TEXT,
    }
    required = ("date",)

    @classmethod
    def initial(cls) -> dict:
        return {"date": today_iso()}

    @classmethod
    def from_record(cls, c: CashIn) -> dict:
        return {
            "project_id": c.project_id,
            "date": to_input_date(c.date),
            "amount": c.amount,
            "comment": c.comment,
        }


class ExpenseForm(RecordForm):
    fields = {
        "project_id": INT,
        "date": DATE,
        "amount": NUMBER,
        "category": STR,
        "comment": TEXT,
    }
    required = ("date", "category")

    @classmethod
    def initial(cls) -> dict:
        return {"date": today_iso(), "category": "materials"}

    @classmethod
    def from_record(cls, e: Expense) -> dict:
        return {
            "project_id": e.project_id,
            "date": to_input_date(e.date),
            "amount": e.amount,
            "category": e.category,
            "comment": e.comment,
        }


class PayoutForm(RecordForm):
    fields = {
        "project_id": INT,
        "crew_id": INT,
        "date": DATE,
        "amount": NUMBER,
        "payment_method": STR,
        "comment": TEXT,
    }

    @classmethod
    def initial(cls) -> dict:
        return {"date": today_iso(), "payment_method": "cash"}

    @classmethod
    def from_record(cls, p: Payout) -> dict:
        return {
            "project_id": p.project_id,
            "crew_id": p.crew_id,
            "date": to_input_date(p.date),
            "amount": p.amount,
            "payment_method": p.payment_method,
            "comment": p.comment,
        }

    @classmethod
    def validate(cls, state: Mapping[str, Any]) -> str | None:
        if not state.get("crew_id"):
            return "Select a crew."
        return super().validate(state)


# =========================================================
# Crew
# =========================================================
class CrewForm(RecordForm):
    fields = {
        "name": STR,
        "contact": STR,
        "phone": STR,
        "notes": TEXT,
        "is_active": BOOL,
    }
    required = ("name",)
    labels = {"name": "Crew name"}

    @classmethod
    def initial(cls) -> dict:
        return {"is_active": True}

    @classmethod
    def from_record(cls, c: Crew) -> dict:
        return {
            "name": c.name,
            "contact": c.contact,
            "phone": c.phone,
            "notes": c.notes,
            "is_active": c.is_active,
        }


# =========================================================
# Employee
# =========================================================
class EmployeeForm(RecordForm):
    fields = {
        "username": STR,
        "password": STR,
        "full_name": STR,
        "role": STR,
    }
    required = ("full_name", "username")
    labels = {"full_name": "Full name", "username": "Username"}

    @classmethod
    def initial(cls) -> dict:
        return {"role": "foreman", "project_ids": []}

    @classmethod
    def from_record(cls, e: Employee) -> dict:
        return {
            "username": e.username,
            "password": "",
            "full_name": e.full_name,
            "role": e.role,
            "project_ids": list(e.project_ids),
        }

    @classmethod
    def from_request(cls, form: Any) -> dict:
        state = super().from_request(form)
        state["role"] = state["role"] or "foreman"
        raw_ids = form.getlist("project_ids") if hasattr(form, "getlist") else form.get("project_ids") or []
        state["project_ids"] = [to_int(v) for v in raw_ids if to_int(v) > 0]
        return with_role(state, state["role"])

    @classmethod
    def validate(cls, state: Mapping[str, Any], creating: bool = False) -> str | None:
        error = super().validate(state)
        if error:
            return error
        if creating and not state.get("password"):
            return "Password is required."
        if state.get("password") and len(state["password"]) < 4:
            return "Password must be at least 4 characters."
        return None

    @classmethod
    def payload(cls, state: Mapping[str, Any], creating: bool = False) -> dict:
        body = {
            "username": state["username"],
            "full_name": state["full_name"],
            "role": state["role"],
            "project_ids": [] if state["role"] == ROLE_ADMIN else list(state.get("project_ids") or []),
        }
        if creating or state.get("password"):
            body["password"] = state.get("password", "")
        return body


def with_role(state: dict, role: str) -> dict:
    """Switching to admin drops the project allow-list; admins see everything."""
    state = dict(state, role=role)
    if role == ROLE_ADMIN:
        state["project_ids"] = []
    return state


# =========================================================
# Portal (super admin)
# =========================================================
class PortalForm(RecordForm):
    fields = {
        "name": STR,
        "owner_email": STR,
        "plan": STR,
        "is_paid": BOOL,
        "paid_until": OPTIONAL_DATE,
        "status": STR,
        "max_users": INT,
        "max_storage_mb": INT,
        "users_count": INT,
    }
    required = ("name",)
    labels = {"name": "Portal name", "owner_email": "Owner email"}

    @classmethod
    def initial(cls) -> dict:
        return {"plan": "free", "status": "active", "max_users": 10, "max_storage_mb": 1000}

    @classmethod
    def from_record(cls, p: Portal) -> dict:
        return {
            "name": p.name,
            "owner_email": p.owner_email,
            "plan": p.subscription.plan,
            "is_paid": p.subscription.is_paid,
            "paid_until": to_input_date(p.subscription.paid_until),
            "status": p.status,
            "max_users": p.limits.max_users or 10,
            "max_storage_mb": p.limits.max_storage_mb or 1000,
            "users_count": p.users_count,
        }

    @classmethod
    def validate(cls, state: Mapping[str, Any], creating: bool = False) -> str | None:
        error = super().validate(state)
        if error:
            return error
        if creating:
            email = state.get("owner_email") or ""
            if not email:
                return "Owner email is required."
            if "@" not in email:
                return "Owner email is not valid."
        return None

    @classmethod
    def payload(cls, state: Mapping[str, Any], creating: bool = False) -> dict:
        body = {
            "name": state["name"],
            "subscription": {
                "plan": state["plan"] or "free",
                "isPaid": bool(state["is_paid"]),
                "paidUntil": state["paid_until"] or None,
            },
            "status": state["status"] or "active",
            "limits": {
                "maxUsers": state["max_users"],
                "maxStorageMb": state["max_storage_mb"],
            },
        }
        if creating:
            body["ownerEmail"] = state["owner_email"].lower()
        else:
            body["usersCount"] = state["users_count"]
        return body
