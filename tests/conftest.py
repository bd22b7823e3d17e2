"""Shared pytest fixtures for the reminder engine and adapters.

Provides a manually driven clock and in-memory fakes for the calendar read
port and the notification port.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from gcal_mcp.automation import ReminderScheduler, ReminderStateStore
from gcal_mcp.config import ReminderSettings, build_reminder_settings
from gcal_mcp.domain import Appointment

BASE_TIME = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class FakeTimer:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.cancel_calls = 0
        self.fired = False

    def cancel(self) -> None:
        self.cancel_calls += 1
        self.cancelled = True


class FakeClock:
    """Clock whose time only moves when the test says so."""

    def __init__(self, now: datetime = BASE_TIME) -> None:
        self.current = now
        self.timers: List[FakeTimer] = []

    def now(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta

    def set(self, moment: datetime) -> None:
        self.current = moment

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> List[FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled and not timer.fired]

    def fire_next(self) -> FakeTimer:
        timer = self.pending[0]
        self.advance(timedelta(seconds=timer.delay))
        timer.fired = True
        timer.callback()
        return timer


class FakeCalendar:
    """Calendar read port returning appointments that overlap the requested window."""

    def __init__(self) -> None:
        self.appointments: List[Appointment] = []
        self.calls: List[Tuple[datetime, datetime]] = []
        self.failures: List[Exception] = []
        self.gate: Optional[asyncio.Event] = None
        self.active = 0
        self.max_active = 0

    def add(self, appointment: Appointment) -> Appointment:
        self.appointments.append(appointment)
        return appointment

    def remove(self, appointment_id: str) -> None:
        self.appointments = [item for item in self.appointments if item.id != appointment_id]

    def fail_next(self, exc: Exception) -> None:
        self.failures.append(exc)

    async def list_appointments(self, window_start: datetime, window_end: datetime) -> List[Appointment]:
        self.calls.append((window_start, window_end))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
        finally:
            self.active -= 1
        if self.failures:
            raise self.failures.pop(0)
        return [
            item
            for item in self.appointments
            if item.ends_at > window_start and item.starts_at < window_end
        ]


class FakeNotifier:
    """Notification port recording every call; failures are configured per appointment."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, timedelta]] = []
        self.sent: List[Tuple[str, timedelta]] = []
        self.errors: Dict[str, Exception] = {}
        self.results: Dict[str, bool] = {}

    async def send_reminder(self, appointment: Appointment, offset: timedelta) -> bool:
        self.calls.append((appointment.id, offset))
        if appointment.id in self.errors:
            raise self.errors[appointment.id]
        if self.results.get(appointment.id) is False:
            return False
        self.sent.append((appointment.id, offset))
        return True


def make_appointment(
    appointment_id: str = "appt-1",
    *,
    starts_at: datetime = BASE_TIME,
    duration: timedelta = timedelta(minutes=30),
    title: str = "Dentist",
    recipients: Tuple[str, ...] = ("patient@example.com",),
) -> Appointment:
    return Appointment(
        id=appointment_id,
        title=title,
        starts_at=starts_at,
        ends_at=starts_at + duration,
        recipients=recipients,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def calendar() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def reminder_settings() -> ReminderSettings:
    return build_reminder_settings(
        poll_interval=timedelta(seconds=60),
        offsets=(timedelta(hours=24), timedelta(hours=1)),
        retention=timedelta(hours=24),
        max_attempts=3,
        window_margin=timedelta(minutes=10),
    )


@pytest.fixture
def store(reminder_settings: ReminderSettings) -> ReminderStateStore:
    return ReminderStateStore(retention=reminder_settings.retention)


@pytest.fixture
def scheduler(
    calendar: FakeCalendar,
    notifier: FakeNotifier,
    store: ReminderStateStore,
    reminder_settings: ReminderSettings,
    clock: FakeClock,
) -> ReminderScheduler:
    return ReminderScheduler(
        calendar=calendar,
        notifier=notifier,
        store=store,
        settings=reminder_settings,
        clock=clock,
    )
