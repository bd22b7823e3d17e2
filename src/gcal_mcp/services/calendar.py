from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..automation import CalendarUnavailable
from ..data import GoogleNotConfiguredError, GoogleRequestError, GoogleTransportError
from ..domain import Appointment, BusyInterval
from .context import ServiceContext


def _clean_emails(values: Optional[Iterable[str]]) -> tuple[str, ...]:
    return tuple(value.strip() for value in values or () if value and value.strip())


@dataclass(slots=True)
class CalendarService:
    context: ServiceContext
    scan_limit: int = 500

    async def list_appointments(self, window_start: datetime, window_end: datetime) -> List[Appointment]:
        """Calendar read port used by the reminder engine."""

        try:
            return await self.context.appointments.fetch_window(window_start, window_end, limit=self.scan_limit)
        except (GoogleNotConfiguredError, GoogleRequestError, GoogleTransportError) as exc:
            raise CalendarUnavailable(str(exc)) from exc

    async def list_between(self, start: datetime, end: datetime, *, limit: int = 50) -> List[Appointment]:
        if end <= start:
            raise ValueError("end must be after start")
        appointments = await self.context.appointments.fetch_window(start, end, limit=limit)
        return sorted(appointments, key=lambda item: item.starts_at)

    async def get(self, appointment_id: str) -> Appointment:
        return await self.context.appointments.get(appointment_id)

    async def create(
        self,
        *,
        title: str,
        starts_at: datetime,
        ends_at: datetime,
        attendees: Optional[Iterable[str]] = None,
        description: str = "",
        location: Optional[str] = None,
    ) -> Appointment:
        if not title.strip():
            raise ValueError("title is required")
        if ends_at <= starts_at:
            raise ValueError("ends_at must be after starts_at")
        draft = Appointment(
            id="",
            title=title.strip(),
            starts_at=starts_at,
            ends_at=ends_at,
            recipients=_clean_emails(attendees),
            description=description,
            location=location,
        )
        return await self.context.appointments.insert(draft)

    async def update(
        self,
        appointment_id: str,
        *,
        title: Optional[str] = None,
        starts_at: Optional[datetime] = None,
        ends_at: Optional[datetime] = None,
        attendees: Optional[Iterable[str]] = None,
        description: Optional[str] = None,
        location: Optional[str] = None,
    ) -> Appointment:
        changes: Dict[str, Any] = {}
        if title is not None:
            changes["summary"] = title
        if starts_at is not None:
            changes["start"] = {"dateTime": starts_at.isoformat()}
        if ends_at is not None:
            changes["end"] = {"dateTime": ends_at.isoformat()}
        if starts_at is not None and ends_at is not None and ends_at <= starts_at:
            raise ValueError("ends_at must be after starts_at")
        if attendees is not None:
            changes["attendees"] = [{"email": email} for email in _clean_emails(attendees)]
        if description is not None:
            changes["description"] = description
        if location is not None:
            changes["location"] = location
        if not changes:
            raise ValueError("No changes supplied")
        return await self.context.appointments.patch(appointment_id, changes)

    async def delete(self, appointment_id: str) -> bool:
        return await self.context.appointments.delete(appointment_id)

    async def busy_intervals(self, start: datetime, end: datetime) -> List[BusyInterval]:
        if end <= start:
            raise ValueError("end must be after start")
        return await self.context.appointments.free_busy(start, end)
