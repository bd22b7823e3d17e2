"""Domain models for appointments, mail and reminders."""

from __future__ import annotations

from .enums import AppointmentStatus, ReminderStatus
from .models import Appointment, BusyInterval, OutgoingEmail, describe_duration, parse_datetime

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "BusyInterval",
    "OutgoingEmail",
    "ReminderStatus",
    "describe_duration",
    "parse_datetime",
]
