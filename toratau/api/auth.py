# toratau/api/auth.py
from __future__ import annotations

from .client import ApiClient


def login(api: ApiClient, username: str, password: str) -> dict:
    """Returns {"access_token", "token_type", "user"}."""
    return api.post("/auth/login", {"username": username, "password": password})


def register(api: ApiClient, fields: dict) -> dict:
    """Creates a portal, its admin and a demo project. Same response as login."""
    return api.post("/auth/register", fields)


def get_me(api: ApiClient) -> dict:
    return api.get("/auth/me")


def update_profile(api: ApiClient, full_name: str) -> dict:
    return api.put("/auth/profile", {"full_name": full_name})


def change_password(api: ApiClient, current_password: str, new_password: str) -> None:
    api.post(
        "/auth/change-password",
        {"current_password": current_password, "new_password": new_password},
    )
