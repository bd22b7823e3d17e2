from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from ..domain import parse_datetime
from .registry import register_api
from .serializers import serialize_appointment, serialize_busy_interval
from .state import api_state


def _require_credentials() -> None:
    if not api_state.context.gateway.is_ready():
        raise RuntimeError("GOOGLE_ACCESS_TOKEN is not set. Configure Google credentials before calling calendar tools.")


def _parse_datetime(timestamp: str) -> datetime:
    try:
        return parse_datetime(timestamp)
    except ValueError as exc:  # noqa: TRY003
        raise ValueError(f"Invalid ISO timestamp: {timestamp}") from exc


@register_api(
    "list_appointments",
    description="List calendar appointments overlapping the ISO 8601 range [start, end).",
    category="calendar",
    tags=("read",),
)
async def list_appointments(start: str, end: str, max_results: int = 50) -> Dict[str, Any]:
    _require_credentials()
    start_dt = _parse_datetime(start)
    end_dt = _parse_datetime(end)
    appointments = await api_state.calendar.list_between(start_dt, end_dt, limit=max_results)
    return {
        "start": start_dt.isoformat(),
        "end": end_dt.isoformat(),
        "appointments": [serialize_appointment(item) for item in appointments],
    }


@register_api(
    "get_appointment",
    description="Fetch a single appointment by id.",
    category="calendar",
    tags=("read",),
)
async def get_appointment(appointment_id: str) -> Dict[str, Any]:
    _require_credentials()
    appointment = await api_state.calendar.get(appointment_id)
    return {"appointment": serialize_appointment(appointment)}


@register_api(
    "create_appointment",
    description="Create an appointment and invite the attendees by email.",
    category="calendar",
    tags=("write",),
)
async def create_appointment(
    title: str,
    starts_at: str,
    ends_at: str,
    attendees: Optional[List[str]] = None,
    description: str = "",
    location: Optional[str] = None,
) -> Dict[str, Any]:
    _require_credentials()
    appointment = await api_state.calendar.create(
        title=title,
        starts_at=_parse_datetime(starts_at),
        ends_at=_parse_datetime(ends_at),
        attendees=attendees,
        description=description,
        location=location,
    )
    return {"appointment": serialize_appointment(appointment)}


@register_api(
    "update_appointment",
    description="Change the title, time, attendees, description or location of an appointment.",
    category="calendar",
    tags=("write",),
)
async def update_appointment(
    appointment_id: str,
    title: Optional[str] = None,
    starts_at: Optional[str] = None,
    ends_at: Optional[str] = None,
    attendees: Optional[List[str]] = None,
    description: Optional[str] = None,
    location: Optional[str] = None,
) -> Dict[str, Any]:
    _require_credentials()
    appointment = await api_state.calendar.update(
        appointment_id,
        title=title,
        starts_at=_parse_datetime(starts_at) if starts_at else None,
        ends_at=_parse_datetime(ends_at) if ends_at else None,
        attendees=attendees,
        description=description,
        location=location,
    )
    return {"appointment": serialize_appointment(appointment)}


@register_api(
    "delete_appointment",
    description="Delete an appointment and notify its attendees.",
    category="calendar",
    tags=("write",),
)
async def delete_appointment(appointment_id: str) -> Dict[str, Any]:
    _require_credentials()
    deleted = await api_state.calendar.delete(appointment_id)
    return {"appointment_id": appointment_id, "deleted": deleted}


@register_api(
    "check_availability",
    description="Return busy intervals in the ISO 8601 range and whether the whole range is free.",
    category="calendar",
    tags=("read", "availability"),
)
async def check_availability(start: str, end: str) -> Dict[str, Any]:
    _require_credentials()
    start_dt = _parse_datetime(start)
    end_dt = _parse_datetime(end)
    busy = await api_state.calendar.busy_intervals(start_dt, end_dt)
    return {
        "start": start_dt.isoformat(),
        "end": end_dt.isoformat(),
        "available": not busy,
        "busy": [serialize_busy_interval(interval) for interval in busy],
    }
