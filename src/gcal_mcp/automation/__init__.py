"""Background reminder engine for upcoming appointments."""

from __future__ import annotations

from .ports import (
    AsyncioClock,
    CalendarReader,
    CalendarUnavailable,
    Clock,
    NotificationRejected,
    NotificationUnavailable,
    Notifier,
    ReminderPortError,
    TimerHandle,
)
from .scheduler import DueReminder, ReminderScheduler, ScanWindow, TickReport
from .service import CalendarReminderService
from .state import ReminderRecord, ReminderStateStore

__all__ = [
    "AsyncioClock",
    "CalendarReader",
    "CalendarReminderService",
    "CalendarUnavailable",
    "Clock",
    "DueReminder",
    "NotificationRejected",
    "NotificationUnavailable",
    "Notifier",
    "ReminderPortError",
    "ReminderRecord",
    "ReminderScheduler",
    "ReminderStateStore",
    "ScanWindow",
    "TickReport",
    "TimerHandle",
]
