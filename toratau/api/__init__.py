# toratau/api/__init__.py
from __future__ import annotations

from .client import ApiClient, ApiError, SessionExpired, GENERIC_ERROR

__all__ = ["ApiClient", "ApiError", "SessionExpired", "GENERIC_ERROR"]
