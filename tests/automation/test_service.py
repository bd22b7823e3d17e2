"""Tests for the reminder service lifecycle."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from conftest import BASE_TIME, make_appointment
from gcal_mcp.automation import CalendarReminderService, CalendarUnavailable

HOUR = timedelta(hours=1)


@pytest.fixture
def service(calendar, notifier, clock, reminder_settings) -> CalendarReminderService:
    return CalendarReminderService(
        calendar=calendar,
        notifier=notifier,
        settings=reminder_settings,
        clock=clock,
    )


class TestStart:
    @pytest.mark.asyncio
    async def test_start_runs_a_tick_immediately_and_arms_one_timer(self, service, calendar, notifier, clock) -> None:
        calendar.add(make_appointment(starts_at=clock.now() + HOUR))

        result = await service.start_reminder_automation()

        assert result is service
        assert service.running
        assert service.ticks == 1
        assert notifier.sent == [("appt-1", HOUR)]
        assert len(clock.pending) == 1
        assert clock.pending[0].delay == 60

    @pytest.mark.asyncio
    async def test_second_start_is_a_noop(self, service, calendar, clock) -> None:
        await service.start_reminder_automation()
        await service.start_reminder_automation()

        assert service.ticks == 1
        assert len(calendar.calls) == 1
        assert len(clock.timers) == 1

    @pytest.mark.asyncio
    async def test_failed_first_read_still_arms_the_timer(self, service, calendar, clock) -> None:
        calendar.fail_next(CalendarUnavailable("offline"))

        await service.start_reminder_automation()

        assert service.last_report.read_error == "offline"
        assert len(clock.pending) == 1


class TestTicking:
    @pytest.mark.asyncio
    async def test_timer_fires_next_tick_and_rearms(self, service, calendar, clock) -> None:
        await service.start_reminder_automation()

        clock.fire_next()
        await service.wait_idle()

        assert service.ticks == 2
        assert len(calendar.calls) == 2
        assert len(clock.pending) == 1
        assert clock.now() == BASE_TIME + timedelta(seconds=60)

    @pytest.mark.asyncio
    async def test_reminder_becomes_due_on_a_later_tick(self, service, calendar, notifier, clock) -> None:
        calendar.add(make_appointment(starts_at=BASE_TIME + HOUR + timedelta(seconds=90)))
        await service.start_reminder_automation()
        assert notifier.sent == []

        clock.fire_next()
        await service.wait_idle()
        assert notifier.sent == []

        clock.fire_next()
        await service.wait_idle()
        assert notifier.sent == [("appt-1", HOUR)]

    @pytest.mark.asyncio
    async def test_crashing_tick_keeps_the_loop_alive(self, service, clock, monkeypatch) -> None:
        monkeypatch.setattr(service.scheduler, "tick", AsyncMock(side_effect=RuntimeError("boom")))

        await service.start_reminder_automation()

        assert service.running
        assert service.ticks == 1
        assert len(clock.pending) == 1


class TestCleanup:
    @pytest.mark.asyncio
    async def test_cleanup_cancels_the_timer_once(self, service, clock) -> None:
        await service.start_reminder_automation()
        timer = clock.pending[0]

        await service.cleanup()
        await service.cleanup()

        assert not service.running
        assert timer.cancel_calls == 1
        assert clock.pending == []

    @pytest.mark.asyncio
    async def test_cleanup_without_start_is_safe(self, service, clock) -> None:
        await service.cleanup()
        await service.stop()

        assert not service.running
        assert clock.timers == []

    @pytest.mark.asyncio
    async def test_cleanup_waits_for_in_flight_tick(self, service, calendar, notifier, clock) -> None:
        await service.start_reminder_automation()
        calendar.add(make_appointment(starts_at=clock.now() + HOUR + timedelta(seconds=60)))
        calendar.gate = asyncio.Event()

        clock.fire_next()
        await asyncio.sleep(0)
        stopping = asyncio.create_task(service.cleanup())
        await asyncio.sleep(0)
        assert not stopping.done()

        calendar.gate.set()
        await stopping

        assert notifier.sent == [("appt-1", HOUR)]
        assert service.ticks == 2
        assert clock.pending == []

        calls_after_stop = len(notifier.calls)
        await asyncio.sleep(0)
        assert len(notifier.calls) == calls_after_stop

    @pytest.mark.asyncio
    async def test_timer_firing_after_stop_does_nothing(self, service, calendar, clock) -> None:
        await service.start_reminder_automation()
        timer = clock.pending[0]
        await service.cleanup()

        timer.callback()
        await service.wait_idle()

        assert len(calendar.calls) == 1

    @pytest.mark.asyncio
    async def test_service_can_be_restarted(self, service, calendar, clock) -> None:
        await service.start_reminder_automation()
        await service.cleanup()
        await service.start_reminder_automation()

        assert service.running
        assert len(calendar.calls) == 2
        assert len(clock.pending) == 1
        await service.cleanup()


class TestStatus:
    @pytest.mark.asyncio
    async def test_status_distinguishes_pending_and_failed(self, service, calendar, notifier, clock) -> None:
        from gcal_mcp.automation import NotificationUnavailable

        calendar.add(make_appointment("failing", starts_at=clock.now() + HOUR))
        calendar.add(make_appointment("upcoming", starts_at=clock.now() + timedelta(hours=3)))
        notifier.errors["failing"] = NotificationUnavailable("down")

        await service.start_reminder_automation()
        for _ in range(2):
            clock.fire_next()
            await service.wait_idle()

        status = service.status()
        by_id = {(item["appointment_id"], item["offset_seconds"]): item for item in status["records"]}

        assert status["running"] is True
        assert status["ticks"] == 3
        assert by_id[("failing", 3600)]["status"] == "failed"
        assert by_id[("failing", 3600)]["attempts"] == 3
        assert by_id[("upcoming", 3600)]["status"] == "pending"
        assert status["summary"]["failed"] == 1
        assert status["last_tick"]["exhausted"] == ["failing@1 hour"]
        await service.cleanup()


class TestRestartDuringStop:
    @pytest.mark.asyncio
    async def test_restart_waits_for_the_tick_being_stopped(self, service, calendar, clock) -> None:
        await service.start_reminder_automation()
        calendar.gate = asyncio.Event()

        clock.fire_next()
        await asyncio.sleep(0)
        stopping = asyncio.create_task(service.cleanup())
        restarting = asyncio.create_task(service.start_reminder_automation())
        for _ in range(3):
            await asyncio.sleep(0)

        assert len(calendar.calls) == 2
        assert not restarting.done()

        calendar.gate.set()
        await stopping
        await restarting

        assert calendar.max_active == 1
        assert len(calendar.calls) == 3
        assert service.running
        assert len(clock.pending) == 1
        await service.cleanup()
