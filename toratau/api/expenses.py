# toratau/api/expenses.py
from __future__ import annotations

from ..models import Expense
from .client import ApiClient


def list_expenses(api: ApiClient, project_id: int | None = None) -> list[Expense]:
    rows = api.get("/expenses", params={"project_id": project_id})
    return [Expense.from_dict(e) for e in rows or []]


def get_expense(api: ApiClient, expense_id: int) -> Expense:
    return Expense.from_dict(api.get(f"/expenses/{expense_id}"))


def create_expense(api: ApiClient, data: dict) -> Expense:
    return Expense.from_dict(api.post("/expenses", data))


def update_expense(api: ApiClient, expense_id: int, data: dict) -> Expense:
    return Expense.from_dict(api.put(f"/expenses/{expense_id}", data))


def delete_expense(api: ApiClient, expense_id: int) -> None:
    api.delete(f"/expenses/{expense_id}")
