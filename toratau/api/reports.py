# toratau/api/reports.py
from __future__ import annotations

from ..models import ProjectReport
from .client import ApiClient


def get_project_report(api: ApiClient, project_id: int) -> ProjectReport:
    return ProjectReport.from_dict(api.get(f"/reports/project/{project_id}"))
