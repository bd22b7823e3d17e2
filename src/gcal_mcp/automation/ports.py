"""Capabilities the reminder engine consumes.

The engine never talks to Google directly. It reads appointments through a
:class:`CalendarReader`, sends reminders through a :class:`Notifier` and
schedules itself with a :class:`Clock`. Production code wires these to the
services in :mod:`gcal_mcp.services`; tests substitute fakes.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

from ..domain import Appointment


class ReminderPortError(RuntimeError):
    """Base class for failures reported by the engine's collaborators."""


class CalendarUnavailable(ReminderPortError):
    """The calendar could not be read (transport or auth failure)."""


class NotificationUnavailable(ReminderPortError):
    """The notification could not be delivered right now; retrying may help."""


class NotificationRejected(ReminderPortError):
    """The provider refused the notification (bad recipient or content)."""


class CalendarReader(Protocol):
    async def list_appointments(self, window_start: datetime, window_end: datetime) -> list[Appointment]:
        ...


class Notifier(Protocol):
    async def send_reminder(self, appointment: Appointment, offset: timedelta) -> Optional[bool]:
        ...


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Clock(Protocol):
    def now(self) -> datetime:
        ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioClock:
    """Wall clock in UTC backed by the running event loop's timer."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(max(delay, 0.0), callback)
