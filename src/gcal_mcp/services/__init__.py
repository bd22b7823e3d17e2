"""Application services orchestrating data access and domain logic."""

from __future__ import annotations

from .calendar import CalendarService
from .context import ServiceContext
from .mail import MailService, render_reminder
from .reminders import build_reminder_service

__all__ = ["CalendarService", "MailService", "ServiceContext", "build_reminder_service", "render_reminder"]
