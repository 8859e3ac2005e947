# toratau/api/client.py
"""
HTTP client for the construction-management REST backend.

- Attaches the bearer token of the current session
- Sends and decodes JSON
- Reduces every failure to an ApiError carrying a display string
"""

from __future__ import annotations

from typing import Any

import requests

GENERIC_ERROR = "Something went wrong. Please try again."
SESSION_EXPIRED = "Your session has expired. Please log in again."


class ApiError(Exception):
    """Any failed backend call. `message` is safe to show to the user."""

    def __init__(self, message: str | None = None, status: int | None = None):
        self.message = message or GENERIC_ERROR
        self.status = status
        super().__init__(self.message)


class SessionExpired(Exception):
    """
    The backend rejected the bearer token (HTTP 401 on an authenticated call).

    Not an ApiError: views that flash ApiError and stay on the page must not
    swallow it. The app-level handler logs the user out instead.
    """

    def __init__(self, message: str | None = None):
        self.message = message or SESSION_EXPIRED
        self.status = 401
        super().__init__(self.message)


def _error_detail(response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, str) and detail.strip():
            return detail.strip()
        # FastAPI-style validation errors: [{"msg": ...}, ...]
        if isinstance(detail, list) and detail:
            first = detail[0]
            if isinstance(first, dict) and first.get("msg"):
                return str(first["msg"])

    return f"Error {response.status_code}"


class ApiClient:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        http: Any = None,
        timeout: float | None = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.token = token
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        data: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = self.http.request(
                method,
                url,
                headers=self._headers(),
                json=data,
                params=params or None,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ApiError(GENERIC_ERROR) from exc

        # Without a token a 401 is just a failed login
        if response.status_code == 401 and self.token:
            raise SessionExpired()

        if not (200 <= response.status_code < 300):
            raise ApiError(_error_detail(response), status=response.status_code)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(GENERIC_ERROR, status=response.status_code) from exc

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, data: Any = None) -> Any:
        return self.request("POST", path, data=data if data is not None else {})

    def put(self, path: str, data: Any) -> Any:
        return self.request("PUT", path, data=data)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
