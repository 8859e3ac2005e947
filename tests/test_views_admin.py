"""
Name: Super-admin Console Tests

Responsibilities:
  - Portal list filters, sort and summary
  - Block / unblock reload the list
  - Create payload and delete confirmation
"""

import pytest

from .conftest import portal_payload

pytestmark = pytest.mark.unit


@pytest.fixture
def portals(http):
    rows = [
        portal_payload("p1", name="Alpha", usersCount=2),
        portal_payload("p2", name="Beta", status="blocked", usersCount=9),
        portal_payload(
            "p3",
            name="Gamma",
            subscription={"plan": "free", "isPaid": False, "paidUntil": None},
            usersCount=5,
        ),
    ]
    http.on("GET", "/super-admin/portals", rows)
    return rows


def test_console_is_super_admin_only(client, login_as):
    login_as("admin")
    assert client.get("/super-admin/portals").status_code == 403


def test_list_shows_all_with_summary(client, login_as, portals):
    login_as("superAdmin")

    resp = client.get("/super-admin/portals")

    assert resp.status_code == 200
    for name in (b"Alpha", b"Beta", b"Gamma"):
        assert name in resp.data


def test_filters_combine(client, login_as, portals):
    login_as("superAdmin")

    resp = client.get("/super-admin/portals?status=active&paid=unpaid")

    assert b"Gamma" in resp.data
    assert b"Alpha" not in resp.data
    assert b"Beta" not in resp.data


def test_search_matches_owner_email(client, login_as, portals):
    login_as("superAdmin")

    resp = client.get("/super-admin/portals?q=OWNER@P2")

    assert b"Beta" in resp.data
    assert b"Alpha" not in resp.data


def test_sort_by_users_desc(client, login_as, portals):
    login_as("superAdmin")

    body = client.get("/super-admin/portals?sort=usersCount&dir=desc").data.decode()

    assert body.index("Beta") < body.index("Gamma") < body.index("Alpha")


def test_block_redirects_back_to_filtered_list(client, http, login_as, portals):
    login_as("superAdmin")
    http.on("POST", "/super-admin/portals/p1/block", portal_payload("p1", status="blocked"))

    resp = client.post("/super-admin/portals/p1/block", data={"next": "/super-admin/portals?plan=basic"})

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/super-admin/portals?plan=basic")
    assert len(http.called("POST", "/super-admin/portals/p1/block")) == 1


def test_block_ignores_foreign_next(client, http, login_as):
    login_as("superAdmin")
    http.on("POST", "/super-admin/portals/p2/unblock", portal_payload("p2"))

    resp = client.post("/super-admin/portals/p2/unblock", data={"next": "https://evil.test/"})

    assert resp.headers["Location"].endswith("/super-admin/portals")


def test_create_portal_payload(client, http, login_as):
    login_as("superAdmin")
    http.on("POST", "/super-admin/portals", lambda body: portal_payload("new", name=body["name"]))

    resp = client.post(
        "/super-admin/portals/new",
        data={
            "name": "Stroy",
            "owner_email": "Owner@Stroy.test",
            "plan": "basic",
            "is_paid": "1",
            "paid_until": "2030-01-01",
            "status": "active",
            "max_users": "15",
            "max_storage_mb": "500",
        },
    )

    assert resp.status_code == 302
    sent = http.called("POST", "/super-admin/portals")[0].json
    assert sent["ownerEmail"] == "owner@stroy.test"
    assert sent["subscription"] == {"plan": "basic", "isPaid": True, "paidUntil": "2030-01-01"}
    assert sent["limits"] == {"maxUsers": 15, "maxStorageMb": 500}


def test_delete_requires_confirmation(client, http, login_as):
    login_as("superAdmin")
    http.on("DELETE", "/super-admin/portals/p1", None, status=204)

    page = client.get("/super-admin/portals/p1/delete")
    assert page.status_code == 200
    assert http.called("DELETE") == []

    client.post("/super-admin/portals/p1/delete")
    assert len(http.called("DELETE", "/super-admin/portals/p1")) == 1


def test_portal_detail(client, http, login_as):
    login_as("superAdmin")
    http.on("GET", "/super-admin/portals/p1", portal_payload("p1", name="Alpha"))

    resp = client.get("/super-admin/portals/p1")

    assert resp.status_code == 200
    assert b"owner@p1.test" in resp.data
