# toratau/billing.py
"""
Subscription gate.

Pure date arithmetic over a portal's subscription record plus a small
service that loads the record for the logged-in tenant. Everything is
recomputed per request; nothing derived is stored.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Mapping

from .api import ApiClient, ApiError, GENERIC_ERROR
from .api import billing as billing_api
from .models import PortalSubscription, User

DEFAULT_PLAN_PROJECT_LIMITS: dict[str, int | None] = {
    "free": 1,
    "basic": 5,
    "pro": 25,
    "enterprise": None,
}

DEFAULT_WARNING_DAYS = 7

# Monthly price per plan, used for the MRR figure of the super-admin console.
PLAN_MONTHLY_PRICES = {
    "basic": 5000,
    "pro": 10000,
    "enterprise": 20000,
}

SECONDS_PER_DAY = 24 * 60 * 60


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def is_paid(sub: PortalSubscription | None, now: datetime | None = None) -> bool:
    """isPaid AND (no paidUntil OR paidUntil >= now)."""
    if sub is None or not sub.is_paid:
        return False
    if sub.paid_until is None:
        return True
    return _aware(sub.paid_until) >= _aware(now or utcnow())


def is_expired(sub: PortalSubscription | None, now: datetime | None = None) -> bool:
    return not is_paid(sub, now)


def remaining_days(paid_until: datetime | None, now: datetime | None = None) -> int | None:
    """Whole days until `paid_until`, rounded up. Negative once past."""
    if paid_until is None:
        return None
    delta = _aware(paid_until) - _aware(now or utcnow())
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def should_show_warning(
    sub: PortalSubscription | None,
    now: datetime | None = None,
    threshold: int = DEFAULT_WARNING_DAYS,
) -> bool:
    if sub is None:
        return False
    days = remaining_days(sub.paid_until, now)
    if days is None:
        return False
    return days < threshold


TRIAL = "trial"
PAID = "paid"
EXPIRING = "expiring"
EXPIRED = "expired"


def subscription_state(
    sub: PortalSubscription | None,
    now: datetime | None = None,
    threshold: int = DEFAULT_WARNING_DAYS,
) -> str | None:
    """
    trial     free plan, nothing paid, period not over
    paid      paid and not close to the end
    expiring  paid, fewer than `threshold` days left
    expired   period over, or a paid plan that is not paid
    """
    if sub is None:
        return None
    now = _aware(now or utcnow())
    if sub.paid_until is not None and _aware(sub.paid_until) < now:
        return EXPIRED
    if not sub.is_paid:
        return TRIAL if sub.plan == "free" else EXPIRED
    days = remaining_days(sub.paid_until, now)
    if days is not None and days < threshold:
        return EXPIRING
    return PAID


def access_allowed(sub: PortalSubscription | None, now: datetime | None = None) -> bool:
    """No record means nothing to enforce; the backend has the final say."""
    return subscription_state(sub, now) != EXPIRED


def project_limit(
    plan: str | None,
    limits: Mapping[str, int | None] = DEFAULT_PLAN_PROJECT_LIMITS,
) -> int | None:
    if plan in limits:
        return limits[plan]
    return limits.get("free", DEFAULT_PLAN_PROJECT_LIMITS["free"])


def can_add_project(
    sub: PortalSubscription | None,
    project_count: int,
    limits: Mapping[str, int | None] = DEFAULT_PLAN_PROJECT_LIMITS,
) -> bool:
    if sub is None:
        return True
    limit = project_limit(sub.plan, limits)
    if limit is None:
        return True
    return project_count < limit


class SubscriptionService:
    """Per-request view of the current tenant's subscription."""

    def __init__(
        self,
        api: ApiClient,
        user: User | None,
        limits: Mapping[str, int | None] = DEFAULT_PLAN_PROJECT_LIMITS,
        warning_days: int = DEFAULT_WARNING_DAYS,
        now: datetime | None = None,
    ):
        self.api = api
        self.user = user
        self.limits = limits
        self.warning_days = warning_days
        self.now = now
        self.subscription: PortalSubscription | None = None
        self.error: str | None = None
        self._loaded = False

    def load(self) -> PortalSubscription | None:
        if self._loaded:
            return self.subscription
        self._loaded = True

        # super admins are not tied to a tenant
        if self.user is None or self.user.is_super_admin:
            return None

        try:
            self.subscription = billing_api.get_portal_subscription(self.api)
        except ApiError as exc:
            self.error = exc.message or GENERIC_ERROR
            self.subscription = None
        return self.subscription

    @property
    def remaining_days(self) -> int | None:
        sub = self.load()
        return remaining_days(sub.paid_until, self.now) if sub else None

    @property
    def show_warning(self) -> bool:
        return should_show_warning(self.load(), self.now, self.warning_days)

    @property
    def is_paid(self) -> bool:
        return is_paid(self.load(), self.now)

    @property
    def state(self) -> str | None:
        return subscription_state(self.load(), self.now, self.warning_days)

    @property
    def access_allowed(self) -> bool:
        return access_allowed(self.load(), self.now)

    def can_add_project(self, project_count: int) -> bool:
        return can_add_project(self.load(), project_count, self.limits)

    def project_limit(self) -> int | None:
        sub = self.load()
        return project_limit(sub.plan if sub else None, self.limits)
