from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..config import ReminderSettings
from ..domain import Appointment, describe_duration
from .ports import CalendarReader, Clock, NotificationRejected, Notifier, ReminderPortError
from .state import ReminderStateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScanWindow:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


@dataclass(frozen=True, slots=True)
class DueReminder:
    appointment: Appointment
    offset: timedelta

    @property
    def due_at(self) -> datetime:
        return self.appointment.starts_at - self.offset

    @property
    def label(self) -> str:
        return f"{self.appointment.id}@{describe_duration(self.offset)}"


@dataclass(slots=True)
class TickReport:
    started_at: datetime
    window: ScanWindow
    next_delay: timedelta
    appointments: int = 0
    read_error: Optional[str] = None
    sent: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    exhausted: List[str] = field(default_factory=list)
    missed: List[str] = field(default_factory=list)
    purged: int = 0

    @property
    def read_ok(self) -> bool:
        return self.read_error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "window_start": self.window.start.isoformat(),
            "window_end": self.window.end.isoformat(),
            "next_delay_seconds": self.next_delay.total_seconds(),
            "appointments": self.appointments,
            "read_error": self.read_error,
            "sent": list(self.sent),
            "failed": list(self.failed),
            "exhausted": list(self.exhausted),
            "missed": list(self.missed),
            "purged": self.purged,
        }


class ReminderScheduler:
    """One tick of the reminder loop: read, compute, dispatch, persist.

    The scheduler owns no timer. :class:`~gcal_mcp.automation.service.CalendarReminderService`
    calls :meth:`tick` and uses the returned ``next_delay`` to arm the next one.
    """

    def __init__(
        self,
        *,
        calendar: CalendarReader,
        notifier: Notifier,
        store: ReminderStateStore,
        settings: ReminderSettings,
        clock: Clock,
    ) -> None:
        self.calendar = calendar
        self.notifier = notifier
        self.store = store
        self.settings = settings
        self.clock = clock
        self._window_floor: Optional[datetime] = None

    def scan_window(self, now: datetime) -> ScanWindow:
        start = now if self._window_floor is None else max(now, self._window_floor)
        self._window_floor = start
        return ScanWindow(start=start, end=start + self.settings.lookahead)

    def collect_due(self, appointments: List[Appointment], now: datetime, report: TickReport) -> List[DueReminder]:
        due: Dict[tuple, DueReminder] = {}
        for appointment in appointments:
            if appointment.starts_at <= now:
                continue
            for offset in self.settings.offsets:
                record = self.store.observe(appointment, offset, now)
                due_at = record.due_at
                if record.is_settled or due_at > now:
                    continue
                if due_at < record.first_seen_at - self.settings.catch_up_grace:
                    self.store.mark_missed(appointment.id, offset)
                    report.missed.append(DueReminder(appointment, offset).label)
                    logger.info(
                        "Skipping stale %s reminder for %s (was due %s)",
                        describe_duration(offset),
                        appointment.id,
                        due_at.isoformat(),
                    )
                    continue
                due[(appointment.id, offset)] = DueReminder(appointment, offset)
        return sorted(due.values(), key=lambda item: (item.due_at, item.appointment.id))

    async def dispatch(self, reminder: DueReminder, report: TickReport) -> None:
        appointment, offset = reminder.appointment, reminder.offset
        try:
            delivered = await self.notifier.send_reminder(appointment, offset)
        except NotificationRejected as exc:
            self.store.record_attempt(appointment.id, offset, error=str(exc))
            self.store.mark_failed(appointment.id, offset, error=str(exc))
            report.exhausted.append(reminder.label)
            logger.error("Reminder %s rejected by provider: %s", reminder.label, exc)
            return
        except ReminderPortError as exc:
            self._record_failure(reminder, str(exc), report)
            return
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error sending reminder %s", reminder.label)
            self._record_failure(reminder, repr(exc), report)
            return

        if delivered is False:
            self._record_failure(reminder, "notifier reported failure", report)
            return
        self.store.mark_fired(appointment.id, offset, self.clock.now())
        report.sent.append(reminder.label)
        logger.info(
            "Sent %s reminder for '%s' starting %s",
            describe_duration(offset),
            appointment.title,
            appointment.starts_at.isoformat(),
        )

    def _record_failure(self, reminder: DueReminder, error: str, report: TickReport) -> None:
        record = self.store.record_attempt(
            reminder.appointment.id,
            reminder.offset,
            max_attempts=self.settings.max_attempts,
            error=error,
        )
        if record is not None and record.permanently_failed:
            report.exhausted.append(reminder.label)
            logger.error(
                "Giving up on reminder %s after %d attempts: %s",
                reminder.label,
                record.attempts,
                error,
            )
        else:
            report.failed.append(reminder.label)
            logger.warning(
                "Reminder %s failed (attempt %d/%d): %s",
                reminder.label,
                record.attempts if record else 0,
                self.settings.max_attempts,
                error,
            )

    def _forget_vanished(self, appointments: List[Appointment], window: ScanWindow) -> None:
        present = {appointment.id for appointment in appointments}
        vanished = {
            record.appointment_id
            for record in self.store
            if record.appointment_id not in present and window.contains(record.starts_at)
        }
        for appointment_id in vanished:
            logger.info("Appointment %s no longer exists; dropping its reminders", appointment_id)
            self.store.forget(appointment_id)

    async def tick(self) -> TickReport:
        now = self.clock.now()
        window = self.scan_window(now)
        report = TickReport(started_at=now, window=window, next_delay=self.settings.poll_interval)

        try:
            appointments = await self.calendar.list_appointments(window.start, window.end)
        except ReminderPortError as exc:
            report.read_error = str(exc)
            logger.warning("Calendar read failed; skipping dispatch this tick: %s", exc)
        except Exception as exc:  # noqa: BLE001
            report.read_error = repr(exc)
            logger.exception("Unexpected error reading calendar; skipping dispatch this tick")
        else:
            report.appointments = len(appointments)
            for reminder in self.collect_due(appointments, now, report):
                await self.dispatch(reminder, report)
            self._forget_vanished(appointments, window)

        report.purged = self.store.purge_expired(now)
        try:
            self.store.flush()
        except OSError:
            logger.exception("Failed to persist reminder state")

        logger.info(
            "Reminder tick: %d appointments, %d sent, %d failed, %d given up",
            report.appointments,
            len(report.sent),
            len(report.failed),
            len(report.exhausted),
        )
        return report
