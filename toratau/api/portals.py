# toratau/api/portals.py
"""Super-admin tenant management."""

from __future__ import annotations

from ..models import Portal
from .client import ApiClient

BASE = "/super-admin/portals"


def list_portals(api: ApiClient) -> list[Portal]:
    return [Portal.from_dict(p) for p in api.get(BASE) or []]


def get_portal(api: ApiClient, portal_id: str) -> Portal:
    return Portal.from_dict(api.get(f"{BASE}/{portal_id}"))


def create_portal(api: ApiClient, data: dict) -> Portal:
    return Portal.from_dict(api.post(BASE, data))


def update_portal(api: ApiClient, portal_id: str, data: dict) -> Portal:
    return Portal.from_dict(api.put(f"{BASE}/{portal_id}", data))


def delete_portal(api: ApiClient, portal_id: str) -> None:
    api.delete(f"{BASE}/{portal_id}")


def block_portal(api: ApiClient, portal_id: str) -> Portal:
    return Portal.from_dict(api.post(f"{BASE}/{portal_id}/block", {}))


def unblock_portal(api: ApiClient, portal_id: str) -> Portal:
    return Portal.from_dict(api.post(f"{BASE}/{portal_id}/unblock", {}))
