# toratau/navigation.py
"""
Header and sidebar state.

- The current project comes from the URL, else from the last one seen.
- The tenant display name is a local, per-browser override.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .session import LAST_PROJECT_KEY, LOGO_KEY, SessionStore

PROJECT_PATH_RE = re.compile(r"/projects/(\d+)")

DEFAULT_LOGO = "TS"
LOGO_MAX_LENGTH = 20


def project_id_from_path(path: str | None) -> int | None:
    match = PROJECT_PATH_RE.search(path or "")
    return int(match.group(1)) if match else None


def current_object_id(path: str | None, stored_id: int | str | None) -> int | None:
    """URL wins; the stored id keeps the sidebar populated elsewhere."""
    url_id = project_id_from_path(path)
    if url_id is not None:
        return url_id
    if stored_id in (None, ""):
        return None
    try:
        return int(stored_id)
    except (TypeError, ValueError):
        return None


def remember_object(store: SessionStore, path: str | None) -> int | None:
    """Persist the URL project id, return the effective current id."""
    url_id = project_id_from_path(path)
    if url_id is not None and store.get(LAST_PROJECT_KEY) != url_id:
        store.set(LAST_PROJECT_KEY, url_id)
    return current_object_id(path, store.get(LAST_PROJECT_KEY))


# =========================================================
# Sidebar
# =========================================================
@dataclass(frozen=True)
class NavItem:
    endpoint: str
    label: str
    icon: str


PROJECT_NAV_ITEMS = (
    NavItem("main.project_detail", "Summary", "📊"),
    NavItem("main.payouts_list", "Payouts", "💸"),
    NavItem("main.cash_in_list", "Payments", "💰"),
    NavItem("main.expenses_list", "Expenses", "🧾"),
)


# =========================================================
# Editable tenant name
# =========================================================
class Branding:
    def __init__(self, store: SessionStore, default: str = DEFAULT_LOGO):
        self.store = store
        self.default = default or DEFAULT_LOGO

    @property
    def name(self) -> str:
        return self.store.get(LOGO_KEY) or self.default

    def commit(self, value: str | None) -> str:
        """Enter/blur: trim, cap length, empty falls back to the default."""
        trimmed = (value or "").strip()[:LOGO_MAX_LENGTH] or self.default
        self.store.set(LOGO_KEY, trimmed)
        return trimmed
