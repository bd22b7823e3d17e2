from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ...domain import Appointment, AppointmentStatus, BusyInterval
from ..google import CALENDAR_API_BASE_URL, GoogleGateway

logger = logging.getLogger(__name__)


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(slots=True)
class AppointmentRepository:
    gateway: GoogleGateway
    calendar_id: str

    def _events_url(self, event_id: Optional[str] = None) -> str:
        base = f"{CALENDAR_API_BASE_URL}/calendars/{quote(self.calendar_id, safe='')}/events"
        return f"{base}/{quote(event_id, safe='')}" if event_id else base

    async def fetch_window(self, start: datetime, end: datetime, *, limit: int = 250) -> List[Appointment]:
        params: Dict[str, Any] = {
            "timeMin": _rfc3339(start),
            "timeMax": _rfc3339(end),
            "singleEvents": "true",
            "showDeleted": "false",
            "orderBy": "startTime",
            "maxResults": min(max(limit, 1), 2500),
        }
        appointments: list[Appointment] = []
        while True:
            payload = await self.gateway.request_json("GET", self._events_url(), params=params)
            for record in payload.get("items") or []:
                try:
                    appointment = Appointment.from_google(record)
                except (KeyError, ValueError) as exc:
                    logger.warning("Skipping malformed event %s: %s", record.get("id"), exc)
                    continue
                if appointment.status is AppointmentStatus.CANCELLED:
                    continue
                appointments.append(appointment)
            page_token = payload.get("nextPageToken")
            if not page_token or len(appointments) >= limit:
                break
            params["pageToken"] = page_token
        return appointments[:limit]

    async def get(self, event_id: str) -> Appointment:
        payload = await self.gateway.request_json("GET", self._events_url(event_id))
        return Appointment.from_google(payload)

    async def insert(self, appointment: Appointment) -> Appointment:
        payload = await self.gateway.request_json(
            "POST",
            self._events_url(),
            params={"sendUpdates": "all"},
            json_body=appointment.to_google(),
        )
        return Appointment.from_google(payload)

    async def patch(self, event_id: str, changes: Dict[str, Any]) -> Appointment:
        payload = await self.gateway.request_json(
            "PATCH",
            self._events_url(event_id),
            params={"sendUpdates": "all"},
            json_body=changes,
        )
        return Appointment.from_google(payload)

    async def delete(self, event_id: str) -> bool:
        await self.gateway.request_json("DELETE", self._events_url(event_id), params={"sendUpdates": "all"})
        return True

    async def free_busy(self, start: datetime, end: datetime) -> List[BusyInterval]:
        payload = await self.gateway.request_json(
            "POST",
            f"{CALENDAR_API_BASE_URL}/freeBusy",
            json_body={
                "timeMin": _rfc3339(start),
                "timeMax": _rfc3339(end),
                "items": [{"id": self.calendar_id}],
            },
        )
        calendar = (payload.get("calendars") or {}).get(self.calendar_id) or {}
        return [BusyInterval.from_google(item) for item in calendar.get("busy") or []]
