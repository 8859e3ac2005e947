# toratau/constants.py
from __future__ import annotations

ROLE_LABELS = {
    "admin": "Administrator",
    "foreman": "Foreman",
    "superAdmin": "Super admin",
}

PROJECT_STATUS_LABELS = {
    "new": "New",
    "in_progress": "In progress",
    "paused": "Paused",
    "completed": "Completed",
    "archived": "Archived",
}

PROJECT_STATUS_COLORS = {
    "new": "#3b82f6",
    "in_progress": "#16a34a",
    "paused": "#eab308",
    "completed": "#6b7280",
    "archived": "#9ca3af",
}

PAYOUT_STATUS_LABELS = {
    "created": "Created",
    "approved": "Approved",
    "cancelled": "Cancelled",
}

EXPENSE_CATEGORY_LABELS = {
    "materials": "Materials",
    "tools": "Tools",
    "transport": "Transport",
    "other": "Other",
}

PAYMENT_METHOD_LABELS = {
    "cash": "Cash",
    "transfer": "Bank transfer",
}

PLAN_LABELS = {
    "free": "Free",
    "basic": "Basic",
    "pro": "Pro",
    "enterprise": "Enterprise",
}

PORTAL_STATUS_LABELS = {
    "active": "Active",
    "blocked": "Blocked",
    "deleted": "Deleted",
}


def template_constants() -> dict:
    return {
        "ROLE_LABELS": ROLE_LABELS,
        "PROJECT_STATUS_LABELS": PROJECT_STATUS_LABELS,
        "PROJECT_STATUS_COLORS": PROJECT_STATUS_COLORS,
        "PAYOUT_STATUS_LABELS": PAYOUT_STATUS_LABELS,
        "EXPENSE_CATEGORY_LABELS": EXPENSE_CATEGORY_LABELS,
        "PAYMENT_METHOD_LABELS": PAYMENT_METHOD_LABELS,
        "PLAN_LABELS": PLAN_LABELS,
        "PORTAL_STATUS_LABELS": PORTAL_STATUS_LABELS,
    }
