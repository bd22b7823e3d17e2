from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..domain import parse_datetime
from .registry import register_api

_STYLES = {
    "iso": None,
    "date": "%Y-%m-%d",
    "time": "%H:%M",
    "short": "%d %b %Y %H:%M",
    "long": "%A, %d %B %Y at %H:%M %Z",
}


def _zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name}") from exc


def _render(moment: datetime, style: str) -> str:
    if style not in _STYLES:
        raise ValueError(f"style must be one of: {', '.join(_STYLES)}")
    pattern = _STYLES[style]
    return moment.isoformat() if pattern is None else moment.strftime(pattern).strip()


@register_api(
    "get_current_datetime",
    description="Return the current date and time in the requested IANA timezone.",
    category="date",
    tags=("date", "time"),
)
def get_current_datetime(timezone_name: str = "UTC") -> Dict[str, Any]:
    zone = _zone(timezone_name)
    now = datetime.now(zone)
    return {
        "timezone": timezone_name,
        "iso": now.isoformat(),
        "date": now.date().isoformat(),
        "time": now.strftime("%H:%M:%S"),
        "weekday": now.strftime("%A"),
        "human": _render(now, "long"),
    }


@register_api(
    "format_datetime",
    description="Convert an ISO 8601 timestamp to a timezone and render it (iso, date, time, short, long).",
    category="date",
    tags=("date", "format"),
)
def format_datetime(value: str, timezone_name: str = "UTC", style: str = "long") -> Dict[str, Optional[str]]:
    try:
        moment = parse_datetime(value)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    localized = moment.astimezone(_zone(timezone_name))
    return {"input": value, "timezone": timezone_name, "style": style, "formatted": _render(localized, style)}
