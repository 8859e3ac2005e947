"""
Name: Form State Tests

Responsibilities:
  - Numeric coercion from submitted text
  - Required fields and per-form rules
  - Payload shape sent to the backend
"""

import pytest
from werkzeug.datastructures import MultiDict

from toratau.forms import (
    CashInForm,
    EmployeeForm,
    PayoutForm,
    PortalForm,
    ProjectForm,
    to_number,
    with_role,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "raw,expected",
    [("12", 12), ("12.5", 12.5), ("1,5", 1.5), ("", 0), ("abc", 0), (None, 0), (7, 7)],
)
def test_to_number(raw, expected):
    assert to_number(raw) == expected


def test_project_form_defaults_and_required_fields():
    state = ProjectForm.defaults()
    assert state["status"] == "new"
    assert state["start_date"]
    assert ProjectForm.validate(state) == "Project name is required."

    state.update(name="House")
    assert ProjectForm.validate(state) == "Client is required."


def test_project_form_coerces_numbers_and_blank_end_date():
    form = MultiDict(
        {
            "name": " House ",
            "client": "ACME",
            "start_date": "2024-05-01",
            "end_date": "",
            "contract_amount": "150000",
            "planned_cost": "oops",
        }
    )
    state = ProjectForm.from_request(form)
    payload = ProjectForm.payload(state)

    assert payload["name"] == "House"
    assert payload["contract_amount"] == 150000
    assert payload["planned_cost"] == 0
    assert payload["end_date"] is None
    assert payload["status"] == "new"


def test_cash_in_form_requires_date():
    state = CashInForm.defaults(project_id=3)
    assert CashInForm.validate(state) is None
    state["date"] = ""
    assert CashInForm.validate(state) == "Date is required."


def test_payout_form_requires_crew():
    state = PayoutForm.from_request(MultiDict({"date": "2024-05-01", "amount": "1000", "crew_id": ""}))
    assert state["crew_id"] == 0
    assert PayoutForm.validate(state) == "Select a crew."


def test_switching_to_admin_clears_project_ids():
    state = EmployeeForm.defaults(project_ids=[1, 2])
    switched = with_role(state, "admin")
    assert switched["project_ids"] == []
    assert state["project_ids"] == [1, 2]

    assert with_role(state, "foreman")["project_ids"] == [1, 2]


def test_employee_from_request_reads_checkbox_list():
    form = MultiDict(
        [("full_name", "Ivan"), ("username", "ivan"), ("role", "foreman"),
         ("project_ids", "3"), ("project_ids", "5"), ("project_ids", "x")]
    )
    state = EmployeeForm.from_request(form)
    assert state["project_ids"] == [3, 5]


def test_employee_password_rules():
    state = EmployeeForm.defaults(full_name="Ivan", username="ivan")
    assert EmployeeForm.validate(state, creating=True) == "Password is required."
    assert EmployeeForm.validate(state) is None

    state["password"] = "abc"
    assert EmployeeForm.validate(state) == "Password must be at least 4 characters."


def test_employee_payload_omits_blank_password_on_edit():
    state = EmployeeForm.defaults(full_name="Ivan", username="ivan", project_ids=[4])
    assert "password" not in EmployeeForm.payload(state)

    state["password"] = "secret"
    body = EmployeeForm.payload(state, creating=True)
    assert body["password"] == "secret"
    assert body["project_ids"] == [4]


def test_portal_create_requires_owner_email():
    state = PortalForm.defaults(name="Acme")
    assert PortalForm.validate(state, creating=True) == "Owner email is required."
    state["owner_email"] = "nope"
    assert PortalForm.validate(state, creating=True) == "Owner email is not valid."
    assert PortalForm.validate(state) is None


def test_portal_payload_nests_subscription_and_limits():
    form = MultiDict(
        {
            "name": "Acme",
            "owner_email": "Boss@Acme.test",
            "plan": "pro",
            "is_paid": "1",
            "paid_until": "",
            "status": "active",
            "max_users": "20",
            "max_storage_mb": "2048",
        }
    )
    state = PortalForm.from_request(form)

    created = PortalForm.payload(state, creating=True)
    assert created["ownerEmail"] == "boss@acme.test"
    assert created["subscription"] == {"plan": "pro", "isPaid": True, "paidUntil": None}
    assert created["limits"] == {"maxUsers": 20, "maxStorageMb": 2048}
    assert "usersCount" not in created

    edited = PortalForm.payload(state)
    assert "ownerEmail" not in edited
    assert edited["usersCount"] == 0
