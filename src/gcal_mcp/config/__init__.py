"""Configuration models and helpers."""

from __future__ import annotations

from .settings import (
    AppSettings,
    GoogleSettings,
    MailSettings,
    ReminderSettings,
    ServerSettings,
    build_reminder_settings,
    get_settings,
    parse_duration,
)

__all__ = [
    "AppSettings",
    "GoogleSettings",
    "MailSettings",
    "ReminderSettings",
    "ServerSettings",
    "build_reminder_settings",
    "get_settings",
    "parse_duration",
]
