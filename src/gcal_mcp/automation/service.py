from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from ..config import ReminderSettings
from .ports import AsyncioClock, CalendarReader, Clock, Notifier, TimerHandle
from .scheduler import ReminderScheduler, TickReport
from .state import ReminderStateStore

logger = logging.getLogger(__name__)


class CalendarReminderService:
    """Owns the reminder loop: one scheduler, one timer, one in-flight tick at most.

    ``start_reminder_automation`` runs a tick immediately and then re-arms a
    one-shot timer after every completed tick, so ticks never overlap.
    ``cleanup`` cancels the pending timer and waits for a running tick; after
    it returns no further reminders are dispatched.
    """

    def __init__(
        self,
        *,
        calendar: CalendarReader,
        notifier: Notifier,
        settings: ReminderSettings,
        clock: Optional[Clock] = None,
        store: Optional[ReminderStateStore] = None,
    ) -> None:
        self.settings = settings
        self.clock = clock or AsyncioClock()
        self.store = store or ReminderStateStore(retention=settings.retention, path=settings.state_file)
        self.scheduler = ReminderScheduler(
            calendar=calendar,
            notifier=notifier,
            store=self.store,
            settings=settings,
            clock=self.clock,
        )
        self._running = False
        self._timer: Optional[TimerHandle] = None
        self._inflight: Optional[asyncio.Task] = None
        self.last_report: Optional[TickReport] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    async def start_reminder_automation(self) -> "CalendarReminderService":
        if self._running:
            logger.debug("Reminder automation already running")
            return self
        # A stop may still be waiting on the previous tick.
        await self.wait_idle()
        if self._running:
            return self
        if not self.settings.offsets:
            logger.warning("No reminder offsets configured; the loop will run but never send")
        self._running = True
        logger.info(
            "Starting reminder automation (every %ss, offsets: %s)",
            int(self.settings.poll_interval.total_seconds()),
            ", ".join(str(offset) for offset in self.settings.offsets) or "none",
        )
        self._inflight = asyncio.ensure_future(self._run_tick())
        await self.wait_idle()
        return self

    async def cleanup(self) -> None:
        was_running = self._running
        self._running = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        await self.wait_idle()
        if was_running:
            logger.info("Reminder automation stopped after %d ticks", self.ticks)

    stop = cleanup

    async def wait_idle(self) -> None:
        task = self._inflight
        if task is None or task.done() or task is asyncio.current_task():
            return
        await asyncio.shield(task)

    def _arm(self) -> None:
        if not self._running or self._timer is not None:
            return
        delay = self.settings.poll_interval.total_seconds()
        if self.last_report is not None:
            delay = self.last_report.next_delay.total_seconds()
        self._timer = self.clock.call_later(delay, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        if not self._running:
            return
        self._inflight = asyncio.ensure_future(self._run_tick())

    async def _run_tick(self) -> None:
        try:
            self.last_report = await self.scheduler.tick()
        except Exception:  # noqa: BLE001
            logger.exception("Reminder tick failed")
        finally:
            self.ticks += 1
            self._arm()

    def status(self) -> Dict[str, Any]:
        return {
            "running": self._running,
            "ticks": self.ticks,
            "poll_interval_seconds": self.settings.poll_interval.total_seconds(),
            "offsets_seconds": [int(offset.total_seconds()) for offset in self.settings.offsets],
            "max_attempts": self.settings.max_attempts,
            "last_tick": self.last_report.to_dict() if self.last_report else None,
            "summary": self.store.summary(),
            "records": [record.to_dict() for record in self.store.records()],
        }
