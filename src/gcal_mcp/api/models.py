from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain import Appointment, BusyInterval


class AppointmentPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    starts_at: str
    ends_at: str
    recipients: List[str] = Field(default_factory=list)
    location: Optional[str] = Field(default=None)
    description: str = Field(default="")
    html_link: Optional[str] = Field(default=None)
    organizer: Optional[str] = Field(default=None)
    status: str
    all_day: bool = Field(default=False)

    @classmethod
    def from_domain(cls, appointment: Appointment) -> "AppointmentPayload":
        return cls(
            id=appointment.id,
            title=appointment.title,
            starts_at=_iso(appointment.starts_at),
            ends_at=_iso(appointment.ends_at),
            recipients=list(appointment.recipients),
            location=appointment.location,
            description=appointment.description,
            html_link=appointment.html_link,
            organizer=appointment.organizer,
            status=appointment.status.value,
            all_day=appointment.all_day,
        )


class BusyIntervalPayload(BaseModel):
    starts_at: str
    ends_at: str

    @classmethod
    def from_domain(cls, interval: BusyInterval) -> "BusyIntervalPayload":
        return cls(starts_at=_iso(interval.starts_at), ends_at=_iso(interval.ends_at))


def _iso(value: datetime) -> str:
    return value.isoformat()
