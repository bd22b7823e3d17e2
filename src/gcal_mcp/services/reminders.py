from __future__ import annotations

from typing import Optional

from ..automation import CalendarReminderService, Clock
from .calendar import CalendarService
from .context import ServiceContext
from .mail import MailService


def build_reminder_service(context: ServiceContext, *, clock: Optional[Clock] = None) -> CalendarReminderService:
    """Wire the reminder engine to the Google-backed calendar and mail services."""

    return CalendarReminderService(
        calendar=CalendarService(context),
        notifier=MailService(context),
        settings=context.settings.reminders,
        clock=clock,
    )
