# toratau/api/billing.py
from __future__ import annotations

from ..models import PortalSubscription
from .client import ApiClient


def get_portal_subscription(api: ApiClient) -> PortalSubscription | None:
    data = api.get("/billing/portal-subscription")
    if not data:
        return None
    return PortalSubscription.from_dict(data)
