"""
Name: Listing (filter / sort) Tests

Responsibilities:
  - Independent filters combine with AND
  - Stable sort and header toggling
  - Project selector grouping
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from werkzeug.datastructures import MultiDict

from toratau.listing import (
    PORTAL_DEFAULT_SORT,
    PORTAL_SORT_KEYS,
    SortState,
    apply_filters,
    employee_search,
    field_equals,
    filter_portals,
    group_projects,
    portal_summary,
    sort_items,
    sort_portals,
    text_match,
)
from toratau.models import Portal, PortalSubscription, Project

pytestmark = pytest.mark.unit

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _portal(pid, name, status="active", plan="basic", paid=True, days=None, users=0, created=0):
    return Portal(
        id=pid,
        name=name,
        owner_email=f"{pid}@example.com",
        status=status,
        subscription=PortalSubscription(
            plan=plan,
            is_paid=paid,
            paid_until=NOW + timedelta(days=days) if days is not None else None,
        ),
        users_count=users,
        created_at=NOW - timedelta(days=created),
    )


PORTALS = [
    _portal("a1", "Alpha", plan="free", paid=False, users=2, created=5),
    _portal("b2", "Beta", status="blocked", plan="pro", users=8, created=3),
    _portal("c3", "Gamma", plan="pro", days=-3, users=2, created=1),
    _portal("d4", "delta", plan="enterprise", days=40, users=5, created=9),
]


def test_text_match_is_case_insensitive_over_all_getters():
    rows = apply_filters(PORTALS, text_match("EXAMPLE.com", lambda p: p.owner_email))
    assert len(rows) == 4
    rows = apply_filters(PORTALS, text_match("c3", lambda p: p.id, lambda p: p.name))
    assert [p.id for p in rows] == ["c3"]


def test_blank_filters_match_everything():
    assert filter_portals(PORTALS, search="  ", status="all", plan="", paid=None) == PORTALS


def test_filters_combine_with_and():
    rows = filter_portals(PORTALS, plan="pro", status="active", now=NOW)
    assert [p.id for p in rows] == ["c3"]

    rows = filter_portals(PORTALS, plan="pro", paid="paid", now=NOW)
    assert [p.id for p in rows] == ["b2"]


def test_paid_filter_uses_paid_until():
    unpaid = filter_portals(PORTALS, paid="unpaid", now=NOW)
    assert {p.id for p in unpaid} == {"a1", "c3"}


def test_field_equals_all_matches_everything():
    assert apply_filters(PORTALS, field_equals(lambda p: p.status, "all")) == PORTALS


def test_sort_is_stable_in_both_directions():
    asc = sort_items(PORTALS, PORTAL_SORT_KEYS["usersCount"], "asc")
    assert [p.id for p in asc] == ["a1", "c3", "d4", "b2"]

    desc = sort_items(PORTALS, PORTAL_SORT_KEYS["usersCount"], "desc")
    assert [p.id for p in desc] == ["b2", "d4", "a1", "c3"]


def test_string_sort_ignores_case():
    rows = sort_portals(PORTALS, SortState("name", "asc"))
    assert [p.name for p in rows] == ["Alpha", "Beta", "delta", "Gamma"]


def test_missing_dates_sort_first_ascending():
    rows = sort_portals(PORTALS, SortState("paidUntil", "asc"))
    assert [p.id for p in rows[:2]] == ["a1", "b2"]


def test_default_sort_is_newest_first():
    rows = sort_portals(PORTALS)
    assert PORTAL_DEFAULT_SORT == SortState("createdAt", "desc")
    assert [p.id for p in rows] == ["c3", "b2", "a1", "d4"]


def test_toggle_flips_same_field_and_resets_new_field():
    state = SortState("name", "asc")
    assert state.toggle("name") == SortState("name", "desc")
    assert state.toggle("name").toggle("name") == state
    assert SortState("name", "desc").toggle("usersCount") == SortState("usersCount", "asc")


def test_sort_state_from_args_rejects_unknown_fields():
    default = SortState("createdAt", "desc")
    args = MultiDict({"sort": "password", "dir": "asc"})
    assert SortState.from_args(args, PORTAL_SORT_KEYS, default) == default

    args = MultiDict({"sort": "name", "dir": "sideways"})
    assert SortState.from_args(args, PORTAL_SORT_KEYS, default) == SortState("name", "asc")


def test_portal_summary_counts():
    summary = portal_summary(PORTALS, now=NOW)
    assert summary["total"] == 4
    assert summary["active"] == 3
    assert summary["blocked"] == 1
    assert summary["expired"] == 2
    # active + paid + not free: Gamma (pro) and delta (enterprise)
    assert summary["mrr"] == 10000 + 20000


def test_employee_search_matches_role():
    employees = [
        SimpleNamespace(full_name="Ivan", username="ivan", role="foreman"),
        SimpleNamespace(full_name="Olga", username="olga", role="admin"),
    ]
    assert [e.username for e in apply_filters(employees, employee_search("ADM"))] == ["olga"]


def _project(pid, name, status):
    return Project(id=pid, name=name, status=status)


def test_group_projects_splits_archive():
    projects = [
        _project(1, "House", "in_progress"),
        _project(2, "Garage", "completed"),
        _project(3, "Shed", "archived"),
    ]
    groups = group_projects(projects)
    assert [p.id for p in groups.active] == [1]
    assert [p.id for p in groups.archived] == [2, 3]
    assert not groups.archive_open


def test_search_hit_in_archive_opens_it():
    projects = (p for p in [_project(1, "House", "new"), _project(2, "Garage", "archived")])
    groups = group_projects(projects, query="gar")
    assert groups.active == []
    assert [p.id for p in groups.archived] == [2]
    assert groups.archive_open


def test_group_projects_empty():
    assert group_projects([], query="x").empty
