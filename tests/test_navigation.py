"""
Name: Navigation State Tests

Responsibilities:
  - Current project resolution (URL first, then last seen)
  - Editable tenant display name
"""

import pytest

from toratau.navigation import (
    Branding,
    current_object_id,
    project_id_from_path,
    remember_object,
)
from toratau.session import LAST_PROJECT_KEY, LOGO_KEY, SessionStore

pytestmark = pytest.mark.unit


def test_project_id_from_path():
    assert project_id_from_path("/projects/12/payouts") == 12
    assert project_id_from_path("/employees") is None
    assert project_id_from_path(None) is None


def test_url_wins_over_stored_id():
    assert current_object_id("/projects/5", 9) == 5
    assert current_object_id("/employees", 9) == 9
    assert current_object_id("/employees", "9") == 9
    assert current_object_id("/employees", None) is None
    assert current_object_id("/employees", "junk") is None


def test_remember_object_persists_last_project():
    store = SessionStore({})
    assert remember_object(store, "/projects/7/expenses") == 7
    assert store.get(LAST_PROJECT_KEY) == 7
    assert remember_object(store, "/employees") == 7


def test_branding_commit_trims_and_caps():
    store = SessionStore({})
    brand = Branding(store, "TS")

    assert brand.name == "TS"
    assert brand.commit("  Stroy Group  ") == "Stroy Group"
    assert brand.commit("x" * 30) == "x" * 20
    assert store.get(LOGO_KEY) == "x" * 20


def test_branding_empty_commit_restores_default():
    store = SessionStore({LOGO_KEY: "Custom"})
    assert Branding(store, "TS").commit("   ") == "TS"

