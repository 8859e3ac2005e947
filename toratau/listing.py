# toratau/listing.py
"""
Client-side filtering and sorting over an in-memory collection.

Predicates are plain callables `item -> bool`, combined with all_of().
Sorting is a stable sort over one (field, direction) pair.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Sequence, TypeVar

from .billing import PLAN_MONTHLY_PRICES, is_paid
from .models import Portal, Project

T = TypeVar("T")
Predicate = Callable[[Any], bool]
Getter = Callable[[Any], Any]

ASC = "asc"
DESC = "desc"

ALL = "all"


# =========================================================
# Predicates
# =========================================================
def match_all(_item: Any) -> bool:
    return True


def text_match(query: str | None, *getters: Getter) -> Predicate:
    q = (query or "").strip().lower()
    if not q:
        return match_all

    def predicate(item: Any) -> bool:
        for get in getters:
            value = get(item)
            if value is not None and q in str(value).lower():
                return True
        return False

    return predicate


def field_equals(getter: Getter, value: Any) -> Predicate:
    if value in (None, "", ALL):
        return match_all

    def predicate(item: Any) -> bool:
        return getter(item) == value

    return predicate


def all_of(*predicates: Predicate) -> Predicate:
    def predicate(item: Any) -> bool:
        return all(p(item) for p in predicates)

    return predicate


def apply_filters(items: Iterable[T], *predicates: Predicate) -> list[T]:
    combined = all_of(*predicates)
    return [item for item in items if combined(item)]


# =========================================================
# Sorting
# =========================================================
@dataclass(frozen=True)
class SortState:
    field: str
    direction: str = ASC

    def toggle(self, field: str) -> "SortState":
        if field == self.field:
            return SortState(field, DESC if self.direction == ASC else ASC)
        return SortState(field, ASC)

    @classmethod
    def from_args(
        cls,
        args: Any,
        allowed: Iterable[str],
        default: "SortState",
    ) -> "SortState":
        field = (args.get("sort") or "").strip()
        direction = (args.get("dir") or "").strip().lower()
        if field not in set(allowed):
            return default
        if direction not in (ASC, DESC):
            direction = ASC
        return cls(field, direction)


def sort_value(value: Any) -> Any:
    """Strings compare case-insensitively, dates by epoch, missing as 0."""
    if value is None:
        return 0
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, str):
        return value.lower()
    if isinstance(value, bool):
        return int(value)
    return value


def sort_items(items: Sequence[T], key: Getter, direction: str = ASC) -> list[T]:
    """
    Stable in both directions: ties keep their incoming order.
    (sorted(reverse=True) also preserves tie order.)
    """
    return sorted(items, key=lambda item: sort_value(key(item)), reverse=direction == DESC)


# =========================================================
# Portals
# =========================================================
PORTAL_SORT_KEYS: dict[str, Getter] = {
    "name": lambda p: p.name,
    "usersCount": lambda p: p.users_count,
    "paidUntil": lambda p: p.subscription.paid_until,
    "createdAt": lambda p: p.created_at,
}

PORTAL_DEFAULT_SORT = SortState("createdAt", DESC)


def paid_filter(value: str | None, now: datetime | None = None) -> Predicate:
    if value == "paid":
        return lambda p: is_paid(p.subscription, now)
    if value == "unpaid":
        return lambda p: not is_paid(p.subscription, now)
    return match_all


def portal_filters(
    search: str | None = None,
    status: str | None = None,
    plan: str | None = None,
    paid: str | None = None,
    now: datetime | None = None,
) -> list[Predicate]:
    return [
        text_match(search, lambda p: p.id, lambda p: p.name, lambda p: p.owner_email),
        field_equals(lambda p: p.status, status),
        field_equals(lambda p: p.subscription.plan, plan),
        paid_filter(paid, now),
    ]


def filter_portals(portals: Iterable[Portal], **filters: Any) -> list[Portal]:
    return apply_filters(portals, *portal_filters(**filters))


def sort_portals(portals: Sequence[Portal], state: SortState = PORTAL_DEFAULT_SORT) -> list[Portal]:
    key = PORTAL_SORT_KEYS.get(state.field, PORTAL_SORT_KEYS[PORTAL_DEFAULT_SORT.field])
    return sort_items(portals, key, state.direction)


def portal_summary(portals: Sequence[Portal], now: datetime | None = None) -> dict[str, int]:
    mrr = sum(
        PLAN_MONTHLY_PRICES.get(p.subscription.plan, 0)
        for p in portals
        if p.status == "active" and p.subscription.is_paid and p.subscription.plan != "free"
    )
    return {
        "total": len(portals),
        "active": sum(1 for p in portals if p.status == "active"),
        "blocked": sum(1 for p in portals if p.status == "blocked"),
        "expired": sum(1 for p in portals if not is_paid(p.subscription, now)),
        "mrr": mrr,
    }


# =========================================================
# Employees
# =========================================================
EMPLOYEE_SORT_KEYS: dict[str, Getter] = {
    "full_name": lambda e: e.full_name,
    "username": lambda e: e.username,
    "role": lambda e: e.role,
    "status": lambda e: "a" if e.is_active else "z",
    "created_at": lambda e: e.created_at,
}

EMPLOYEE_DEFAULT_SORT = SortState("full_name", ASC)


def employee_search(query: str | None) -> Predicate:
    return text_match(query, lambda e: e.full_name, lambda e: e.username, lambda e: e.role)


# =========================================================
# Crews
# =========================================================
def crew_search(query: str | None) -> Predicate:
    return text_match(query, lambda c: c.name, lambda c: c.contact, lambda c: c.notes)


# =========================================================
# Project selector
# =========================================================
@dataclass
class ProjectGroups:
    active: list[Project]
    archived: list[Project]
    archive_open: bool

    @property
    def empty(self) -> bool:
        return not self.active and not self.archived


def group_projects(
    projects: Iterable[Project],
    query: str | None = None,
    archive_open: bool = False,
) -> ProjectGroups:
    """Split into active/archived, name-filtered. A matching search opens the archive."""
    projects = list(projects)
    matches = text_match(query, lambda p: p.name)
    active = [p for p in projects if not p.is_archived and matches(p)]
    archived = [p for p in projects if p.is_archived and matches(p)]
    searching = bool((query or "").strip())
    return ProjectGroups(
        active=active,
        archived=archived,
        archive_open=archive_open or (searching and bool(archived)),
    )
