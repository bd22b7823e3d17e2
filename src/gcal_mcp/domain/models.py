from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional

from .enums import AppointmentStatus


def parse_datetime(value: Any) -> datetime:
    """Parse an ISO 8601 value into an aware datetime (naive values are taken as UTC)."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unsupported datetime value: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_google_time(payload: Optional[Dict[str, Any]]) -> Optional[datetime]:
    if not payload:
        return None
    if payload.get("dateTime"):
        return parse_datetime(payload["dateTime"])
    if payload.get("date"):
        day = date.fromisoformat(payload["date"])
        return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return None


def describe_duration(value: timedelta) -> str:
    """Render an offset the way a person would say it: ``1 day``, ``90 minutes``."""

    seconds = int(value.total_seconds())
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size and seconds % size == 0:
            count = seconds // size
            return f"{count} {unit}" if count == 1 else f"{count} {unit}s"
    return f"{seconds} seconds"


@dataclass(slots=True, frozen=True)
class Appointment:
    """Read-only view of a calendar event."""

    id: str
    title: str
    starts_at: datetime
    ends_at: datetime
    recipients: tuple[str, ...] = ()
    location: Optional[str] = None
    description: str = ""
    html_link: Optional[str] = None
    organizer: Optional[str] = None
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    all_day: bool = False

    @classmethod
    def from_google(cls, record: Dict[str, Any]) -> "Appointment":
        starts_at = _parse_google_time(record.get("start"))
        if starts_at is None:
            raise ValueError(f"Event {record.get('id')!r} has no start time")
        ends_at = _parse_google_time(record.get("end")) or starts_at
        organizer = (record.get("organizer") or {}).get("email")
        recipients = tuple(
            attendee["email"]
            for attendee in record.get("attendees") or []
            if attendee.get("email") and attendee.get("responseStatus") != "declined"
        )
        if not recipients and organizer:
            recipients = (organizer,)
        return cls(
            id=str(record["id"]),
            title=record.get("summary") or "(untitled)",
            starts_at=starts_at,
            ends_at=ends_at,
            recipients=recipients,
            location=record.get("location"),
            description=record.get("description") or "",
            html_link=record.get("htmlLink"),
            organizer=organizer,
            status=AppointmentStatus(record.get("status") or AppointmentStatus.CONFIRMED),
            all_day="date" in (record.get("start") or {}),
        )

    def to_google(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "summary": self.title,
            "start": {"dateTime": self.starts_at.isoformat()},
            "end": {"dateTime": self.ends_at.isoformat()},
            "description": self.description,
            "attendees": [{"email": email} for email in self.recipients],
        }
        if self.location:
            payload["location"] = self.location
        return payload


@dataclass(slots=True, frozen=True)
class BusyInterval:
    starts_at: datetime
    ends_at: datetime

    @classmethod
    def from_google(cls, record: Dict[str, Any]) -> "BusyInterval":
        return cls(starts_at=parse_datetime(record["start"]), ends_at=parse_datetime(record["end"]))


@dataclass(slots=True)
class OutgoingEmail:
    to: list[str]
    subject: str
    body: str
    cc: list[str] = field(default_factory=list)
    sender: Optional[str] = None
