# toratau/api/crews.py
"""Contractor crews: the payees of payouts."""

from __future__ import annotations

from ..models import Crew
from .client import ApiClient


def list_crews(api: ApiClient, active_only: bool = False) -> list[Crew]:
    crews = [Crew.from_dict(c) for c in api.get("/crews") or []]
    if active_only:
        crews = [c for c in crews if c.is_active]
    return crews


def get_crew(api: ApiClient, crew_id: int) -> Crew:
    return Crew.from_dict(api.get(f"/crews/{crew_id}"))


def create_crew(api: ApiClient, data: dict) -> Crew:
    return Crew.from_dict(api.post("/crews", data))


def update_crew(api: ApiClient, crew_id: int, data: dict) -> Crew:
    return Crew.from_dict(api.put(f"/crews/{crew_id}", data))


def delete_crew(api: ApiClient, crew_id: int) -> None:
    api.delete(f"/crews/{crew_id}")
