# toratau/api/payouts.py
"""Crew payouts: created -> approved | cancelled."""

from __future__ import annotations

from ..models import Payout
from .client import ApiClient


def list_payouts(api: ApiClient, project_id: int | None = None) -> list[Payout]:
    rows = api.get("/payouts", params={"project_id": project_id})
    return [Payout.from_dict(p) for p in rows or []]


def get_payout(api: ApiClient, payout_id: int) -> Payout:
    return Payout.from_dict(api.get(f"/payouts/{payout_id}"))


def create_payout(api: ApiClient, data: dict) -> Payout:
    return Payout.from_dict(api.post("/payouts", data))


def update_payout(api: ApiClient, payout_id: int, data: dict) -> Payout:
    return Payout.from_dict(api.put(f"/payouts/{payout_id}", data))


def delete_payout(api: ApiClient, payout_id: int) -> None:
    api.delete(f"/payouts/{payout_id}")


def approve_payout(api: ApiClient, payout_id: int) -> Payout:
    """Admin only."""
    return Payout.from_dict(api.post(f"/payouts/{payout_id}/approve"))


def cancel_payout(api: ApiClient, payout_id: int) -> Payout:
    return Payout.from_dict(api.post(f"/payouts/{payout_id}/cancel"))

