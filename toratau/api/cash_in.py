# toratau/api/cash_in.py
"""Incoming payments from the client of a project."""

from __future__ import annotations

from ..models import CashIn
from .client import ApiClient


def list_cash_ins(api: ApiClient, project_id: int | None = None) -> list[CashIn]:
    rows = api.get("/cashin", params={"project_id": project_id})
    return [CashIn.from_dict(c) for c in rows or []]


def get_cash_in(api: ApiClient, cash_in_id: int) -> CashIn:
    return CashIn.from_dict(api.get(f"/cashin/{cash_in_id}"))


def create_cash_in(api: ApiClient, data: dict) -> CashIn:
    return CashIn.from_dict(api.post("/cashin", data))


def update_cash_in(api: ApiClient, cash_in_id: int, data: dict) -> CashIn:
    return CashIn.from_dict(api.put(f"/cashin/{cash_in_id}", data))


def delete_cash_in(api: ApiClient, cash_in_id: int) -> None:
    api.delete(f"/cashin/{cash_in_id}")
