# toratau/models.py
"""
Records mirrored from the backend's JSON shapes.

The backend owns their lifecycle; the UI only holds them for one page view.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from flask_login import UserMixin

# ======================
# Enumerations
# ======================
ROLE_ADMIN = "admin"
ROLE_FOREMAN = "foreman"
ROLE_SUPER_ADMIN = "superAdmin"

PROJECT_STATUSES = ("new", "in_progress", "paused", "completed", "archived")
ARCHIVED_STATUSES = ("completed", "archived")

PAYOUT_STATUSES = ("created", "approved", "cancelled")
PAYMENT_METHODS = ("cash", "transfer")
EXPENSE_CATEGORIES = ("materials", "tools", "transport", "other")

PORTAL_PLANS = ("free", "basic", "pro", "enterprise")
PORTAL_STATUSES = ("active", "blocked", "deleted")


# ======================
# Parsing helpers
# ======================
def parse_datetime(value: Any) -> datetime | None:
    """ISO string -> aware datetime. Naive values are read as UTC."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        raw = str(value).strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _num(value: Any, default: float = 0) -> float:
    try:
        return float(value) if value not in (None, "") else default
    except (TypeError, ValueError):
        return default


def _ids(values: Any) -> list[int] | None:
    if values is None:
        return None
    return [int(v) for v in values]


def _display_name(record: Any) -> str | None:
    if isinstance(record, dict):
        return record.get("full_name") or record.get("username")
    return None


# ======================
# User / Employee
# ======================
@dataclass
class User(UserMixin):
    id: int
    username: str
    full_name: str = ""
    role: str = ROLE_FOREMAN
    is_active_flag: bool = True
    portal_id: str | None = None
    project_ids: list[int] | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            id=int(data["id"]),
            username=data.get("username") or "",
            full_name=data.get("full_name") or "",
            role=data.get("role") or ROLE_FOREMAN,
            is_active_flag=bool(data.get("is_active", True)),
            portal_id=data.get("portal_id"),
            project_ids=_ids(data.get("project_ids")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "role": self.role,
            "is_active": self.is_active_flag,
            "portal_id": self.portal_id,
            "project_ids": self.project_ids,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    # Flask-Login reads `is_active`; keep the backend flag under another name
    # so the dataclass field does not shadow the property.
    @property
    def is_active(self) -> bool:
        return self.is_active_flag

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_foreman(self) -> bool:
        return self.role == ROLE_FOREMAN

    @property
    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


@dataclass
class Employee:
    id: int
    username: str
    full_name: str
    role: str
    is_active: bool = True
    created_at: datetime | None = None
    project_ids: list[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Employee":
        return cls(
            id=int(data["id"]),
            username=data.get("username") or "",
            full_name=data.get("full_name") or "",
            role=data.get("role") or ROLE_FOREMAN,
            is_active=bool(data.get("is_active", True)),
            created_at=parse_datetime(data.get("created_at")),
            project_ids=_ids(data.get("project_ids")) or [],
        )


# ======================
# Project ("object")
# ======================
@dataclass
class Project:
    id: int
    name: str
    address: str = ""
    client: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None
    status: str = "new"
    contract_amount: float = 0
    planned_cost: float = 0
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            address=data.get("address") or "",
            client=data.get("client") or "",
            start_date=parse_datetime(data.get("start_date")),
            end_date=parse_datetime(data.get("end_date")),
            status=data.get("status") or "new",
            contract_amount=_num(data.get("contract_amount")),
            planned_cost=_num(data.get("planned_cost")),
            notes=data.get("notes") or "",
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
        )

    @property
    def is_archived(self) -> bool:
        return self.status in ARCHIVED_STATUSES


# ======================
# Money records
# ======================
@dataclass
class CashIn:
    id: int
    project_id: int
    date: datetime | None
    amount: float
    comment: str = ""
    created_by: int | None = None
    creator: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "CashIn":
        return cls(
            id=int(data["id"]),
            project_id=int(data["project_id"]),
            date=parse_datetime(data.get("date")),
            amount=_num(data.get("amount")),
            comment=data.get("comment") or "",
            created_by=data.get("created_by"),
            creator=_display_name(data.get("creator")),
        )


@dataclass
class Expense:
    id: int
    project_id: int
    date: datetime | None
    amount: float
    category: str = "other"
    comment: str = ""
    created_by: int | None = None
    creator: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Expense":
        return cls(
            id=int(data["id"]),
            project_id=int(data["project_id"]),
            date=parse_datetime(data.get("date")),
            amount=_num(data.get("amount")),
            category=data.get("category") or "other",
            comment=data.get("comment") or "",
            created_by=data.get("created_by"),
            creator=_display_name(data.get("creator")),
        )


@dataclass
class Payout:
    id: int
    project_id: int
    crew_id: int
    date: datetime | None
    amount: float
    payment_method: str = "cash"
    comment: str = ""
    status: str = "created"
    crew_name: str | None = None
    created_by: int | None = None
    creator: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Payout":
        crew = data.get("crew") or {}
        return cls(
            id=int(data["id"]),
            project_id=int(data["project_id"]),
            crew_id=int(data.get("crew_id") or 0),
            date=parse_datetime(data.get("date")),
            amount=_num(data.get("amount")),
            payment_method=data.get("payment_method") or "cash",
            comment=data.get("comment") or "",
            status=data.get("status") or "created",
            crew_name=crew.get("name") if isinstance(crew, dict) else None,
            created_by=data.get("created_by"),
            creator=_display_name(data.get("creator")),
        )

    @property
    def is_open(self) -> bool:
        return self.status == "created"


# ======================
# Crews and the project report
# ======================
@dataclass
class Crew:
    id: int
    name: str
    contact: str = ""
    phone: str = ""
    notes: str = ""
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "Crew":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            contact=data.get("contact") or "",
            phone=data.get("phone") or "",
            notes=data.get("notes") or "",
            is_active=bool(data.get("is_active", True)),
        )


@dataclass
class CrewSummary:
    crew: Crew
    accrued: float = 0
    paid: float = 0
    debt: float = 0

    @classmethod
    def from_dict(cls, data: dict) -> "CrewSummary":
        return cls(
            crew=Crew.from_dict(data["crew"]),
            accrued=_num(data.get("accrued")),
            paid=_num(data.get("paid")),
            debt=_num(data.get("debt")),
        )


@dataclass
class ProjectReport:
    """Backend-computed totals for one project; see `GET /reports/project/{id}`."""

    project: Project
    total_cash_in: float = 0
    total_expenses: float = 0
    total_accrued: float = 0
    total_paid: float = 0
    total_fact_expense: float = 0
    balance: float = 0
    forecast_profit: float = 0
    plan_deviation: float = 0
    crews_summary: list[CrewSummary] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectReport":
        return cls(
            project=Project.from_dict(data["project"]),
            total_cash_in=_num(data.get("total_cash_in")),
            total_expenses=_num(data.get("total_expenses")),
            total_accrued=_num(data.get("total_accrued")),
            total_paid=_num(data.get("total_paid")),
            total_fact_expense=_num(data.get("total_fact_expense")),
            balance=_num(data.get("balance")),
            forecast_profit=_num(data.get("forecast_profit")),
            plan_deviation=_num(data.get("plan_deviation")),
            crews_summary=[CrewSummary.from_dict(c) for c in data.get("crews_summary") or []],
        )


# ======================
# Portal (tenant)
# ======================
@dataclass
class PortalSubscription:
    plan: str = "free"
    is_paid: bool = False
    paid_until: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> "PortalSubscription":
        data = data or {}
        return cls(
            plan=data.get("plan") or "free",
            is_paid=bool(data.get("isPaid", False)),
            paid_until=parse_datetime(data.get("paidUntil")),
        )

    def to_payload(self) -> dict:
        return {
            "plan": self.plan,
            "isPaid": self.is_paid,
            "paidUntil": self.paid_until.isoformat() if self.paid_until else None,
        }


@dataclass
class PortalLimits:
    max_users: int = 10
    max_storage_mb: int = 1000

    @classmethod
    def from_dict(cls, data: dict | None) -> "PortalLimits":
        data = data or {}
        return cls(
            max_users=int(data.get("maxUsers") or 10),
            max_storage_mb=int(data.get("maxStorageMb") or 1000),
        )


@dataclass
class Portal:
    id: str
    name: str
    owner_email: str
    status: str = "active"
    subscription: PortalSubscription = field(default_factory=PortalSubscription)
    limits: PortalLimits = field(default_factory=PortalLimits)
    users_count: int = 0
    created_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Portal":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            owner_email=data.get("ownerEmail") or "",
            status=data.get("status") or "active",
            subscription=PortalSubscription.from_dict(data.get("subscription")),
            limits=PortalLimits.from_dict(data.get("limits")),
            users_count=int(data.get("usersCount") or 0),
            created_at=parse_datetime(data.get("createdAt")),
        )
