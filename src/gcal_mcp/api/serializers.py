from __future__ import annotations

from typing import Any, Dict

from ..domain import Appointment, BusyInterval
from .models import AppointmentPayload, BusyIntervalPayload


def serialize_appointment(appointment: Appointment) -> Dict[str, Any]:
    return AppointmentPayload.from_domain(appointment).model_dump()


def serialize_busy_interval(interval: BusyInterval) -> Dict[str, Any]:
    return BusyIntervalPayload.from_domain(interval).model_dump()
