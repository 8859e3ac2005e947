# toratau/settings.py
from __future__ import annotations

import os


def _normalize_api_url(url: str | None) -> str:
    if not url:
        return "http://localhost:8000/api"
    return url.strip().rstrip("/")


def _float_env(name: str, default: float | None) -> float | None:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Config:
    # ======================
    # Core
    # ======================
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # ======================
    # Backend API
    # ======================
    # Priority:
    # 1) API_BASE_URL (production)
    # 2) VITE_API_URL (shared .env with the old SPA build)
    # 3) Local default
    API_BASE_URL = _normalize_api_url(
        os.environ.get("API_BASE_URL") or os.environ.get("VITE_API_URL")
    )

    # None = requests default (no timeout)
    API_TIMEOUT = _float_env("API_TIMEOUT", None)

    # ======================
    # Subscription
    # ======================
    SUBSCRIPTION_WARNING_DAYS = int(os.environ.get("SUBSCRIPTION_WARNING_DAYS", "7"))

    # plan -> max projects, None = unlimited
    PLAN_PROJECT_LIMITS = {
        "free": 1,
        "basic": 5,
        "pro": 25,
        "enterprise": None,
    }

    # ======================
    # Branding
    # ======================
    DEFAULT_LOGO = os.environ.get("DEFAULT_LOGO", "TS")

    # ======================
    # Flask-Limiter
    # ======================
    RATELIMIT_STORAGE_URI = (
        os.environ.get("LIMITER_STORAGE_URL")
        or os.environ.get("REDIS_URL")
        or "memory://"
    )
    RATELIMIT_HEADERS_ENABLED = True

    # ======================
    # Proxy / Gunicorn
    # ======================
    PREFERRED_URL_SCHEME = os.environ.get("PREFERRED_URL_SCHEME", "https")
