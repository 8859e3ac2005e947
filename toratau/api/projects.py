# toratau/api/projects.py
from __future__ import annotations

from ..models import Project
from .client import ApiClient


def list_projects(api: ApiClient) -> list[Project]:
    return [Project.from_dict(p) for p in api.get("/projects") or []]


def get_project(api: ApiClient, project_id: int) -> Project:
    return Project.from_dict(api.get(f"/projects/{project_id}"))


def create_project(api: ApiClient, data: dict) -> Project:
    return Project.from_dict(api.post("/projects", data))


def update_project(api: ApiClient, project_id: int, data: dict) -> Project:
    return Project.from_dict(api.put(f"/projects/{project_id}", data))


def delete_project(api: ApiClient, project_id: int) -> None:
    api.delete(f"/projects/{project_id}")
