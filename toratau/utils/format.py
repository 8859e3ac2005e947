# toratau/utils/format.py
"""Display formatting, registered as Jinja filters in create_app()."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from ..models import parse_datetime

EMPTY = "—"


def format_money(amount: Any) -> str:
    try:
        value = float(amount or 0)
    except (TypeError, ValueError):
        value = 0.0
    text = f"{value:,.2f}".rstrip("0").rstrip(".")
    return text.replace(",", " ") + " RUB"


def format_date(value: Any) -> str:
    dt = value if isinstance(value, datetime) else parse_datetime(value)
    if dt is None:
        return EMPTY
    return dt.strftime("%d.%m.%Y")


def format_datetime(value: Any) -> str:
    dt = value if isinstance(value, datetime) else parse_datetime(value)
    if dt is None:
        return EMPTY
    return dt.strftime("%d.%m.%Y %H:%M")


def to_input_date(value: Any) -> str:
    """Stored ISO date-time -> YYYY-MM-DD for <input type=date>."""
    if value in (None, ""):
        return ""
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    return str(value)[:10]


def today_iso() -> str:
    return datetime.now(timezone.utc).date().isoformat()
