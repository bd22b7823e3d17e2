from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional

from dotenv import load_dotenv

load_dotenv()


_DURATION_PATTERN = re.compile(r"^\s*(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>[smhd]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "": "minutes",
}


def parse_duration(text: str) -> timedelta:
    """Parse ``30s``, ``10m``, ``1h``, ``2d`` or a bare number of minutes."""

    match = _DURATION_PATTERN.match(text or "")
    if not match:
        raise ValueError(f"Invalid duration: {text!r}")
    unit = _DURATION_UNITS[match.group("unit").lower()]
    return timedelta(**{unit: float(match.group("value"))})


def normalize_offsets(offsets: Iterable[timedelta]) -> tuple[timedelta, ...]:
    """Deduplicate offsets and order them largest first."""

    unique = {offset for offset in offsets if offset > timedelta(0)}
    return tuple(sorted(unique, reverse=True))


@dataclass(frozen=True)
class GoogleSettings:
    access_token: Optional[str]
    calendar_id: str
    timeout_seconds: float

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.access_token:
            missing.append("GOOGLE_ACCESS_TOKEN")
        return missing


@dataclass(frozen=True)
class MailSettings:
    sender: Optional[str]
    default_recipient: Optional[str]
    subject_prefix: str


@dataclass(frozen=True)
class ReminderSettings:
    enabled: bool
    poll_interval: timedelta
    offsets: tuple[timedelta, ...]
    retention: timedelta
    max_attempts: int
    window_margin: timedelta
    catch_up_grace: timedelta
    state_file: Optional[Path] = None

    @property
    def max_offset(self) -> timedelta:
        return max(self.offsets, default=timedelta(0))

    @property
    def lookahead(self) -> timedelta:
        return self.max_offset + self.window_margin


@dataclass(frozen=True)
class ServerSettings:
    host: str
    port: int


@dataclass(frozen=True)
class AppSettings:
    google: GoogleSettings
    mail: MailSettings
    reminders: ReminderSettings
    server: ServerSettings


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _offsets_from_env(name: str, default: str) -> tuple[timedelta, ...]:
    raw = os.getenv(name, default)
    try:
        return normalize_offsets(parse_duration(part) for part in raw.split(",") if part.strip())
    except ValueError:
        return normalize_offsets(parse_duration(part) for part in default.split(","))


def build_reminder_settings(
    *,
    poll_interval: timedelta = timedelta(seconds=60),
    offsets: Iterable[timedelta] = (timedelta(hours=24), timedelta(hours=1)),
    retention: timedelta = timedelta(hours=24),
    max_attempts: int = 3,
    window_margin: timedelta = timedelta(minutes=10),
    catch_up_grace: Optional[timedelta] = None,
    state_file: Optional[Path] = None,
    enabled: bool = True,
) -> ReminderSettings:
    if poll_interval <= timedelta(0):
        raise ValueError("poll_interval must be positive")
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    return ReminderSettings(
        enabled=enabled,
        poll_interval=poll_interval,
        offsets=normalize_offsets(offsets),
        retention=retention,
        max_attempts=max_attempts,
        window_margin=window_margin,
        catch_up_grace=catch_up_grace if catch_up_grace is not None else poll_interval,
        state_file=state_file,
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    google = GoogleSettings(
        access_token=os.getenv("GOOGLE_ACCESS_TOKEN"),
        calendar_id=os.getenv("GOOGLE_CALENDAR_ID", "primary"),
        timeout_seconds=_float_from_env("GOOGLE_API_TIMEOUT_SECONDS", 30.0),
    )

    mail = MailSettings(
        sender=os.getenv("MAIL_SENDER"),
        default_recipient=os.getenv("MAIL_DEFAULT_RECIPIENT"),
        subject_prefix=os.getenv("MAIL_SUBJECT_PREFIX", "Reminder"),
    )

    poll_seconds = max(_int_from_env("REMINDER_POLL_SECONDS", 60), 1)
    grace_seconds = os.getenv("REMINDER_CATCH_UP_GRACE_SECONDS")
    state_file = os.getenv("REMINDER_STATE_FILE")
    reminders = build_reminder_settings(
        enabled=_bool_from_env("REMINDER_ENABLED", True),
        poll_interval=timedelta(seconds=poll_seconds),
        offsets=_offsets_from_env("REMINDER_OFFSETS", "24h,1h"),
        retention=timedelta(hours=_float_from_env("REMINDER_RETENTION_HOURS", 24.0)),
        max_attempts=max(_int_from_env("REMINDER_MAX_ATTEMPTS", 3), 1),
        window_margin=timedelta(minutes=_float_from_env("REMINDER_WINDOW_MARGIN_MINUTES", 10.0)),
        catch_up_grace=(
            timedelta(seconds=_float_from_env("REMINDER_CATCH_UP_GRACE_SECONDS", poll_seconds))
            if grace_seconds
            else None
        ),
        state_file=Path(state_file).expanduser() if state_file else None,
    )

    server = ServerSettings(
        host=os.getenv("GCAL_MCP_HOST", "127.0.0.1"),
        port=_int_from_env("GCAL_MCP_PORT", 8787),
    )

    return AppSettings(google=google, mail=mail, reminders=reminders, server=server)
