from __future__ import annotations

from enum import Enum


class ReminderStatus(str, Enum):
    PENDING = "pending"
    FIRED = "fired"
    FAILED = "failed"
    MISSED = "missed"


class AppointmentStatus(str, Enum):
    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    CANCELLED = "cancelled"
