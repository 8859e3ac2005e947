# toratau/api/employees.py
from __future__ import annotations

from ..models import Employee
from .client import ApiClient


def list_employees(api: ApiClient) -> list[Employee]:
    return [Employee.from_dict(e) for e in api.get("/employees") or []]


def get_employee(api: ApiClient, employee_id: int) -> Employee:
    return Employee.from_dict(api.get(f"/employees/{employee_id}"))


def create_employee(api: ApiClient, data: dict) -> Employee:
    return Employee.from_dict(api.post("/employees", data))


def update_employee(api: ApiClient, employee_id: int, data: dict) -> Employee:
    return Employee.from_dict(api.put(f"/employees/{employee_id}", data))


def delete_employee(api: ApiClient, employee_id: int) -> None:
    api.delete(f"/employees/{employee_id}")
