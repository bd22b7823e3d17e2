from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Iterable, Optional

from ..automation import NotificationRejected, NotificationUnavailable
from ..data import GoogleNotConfiguredError, GoogleRequestError, GoogleTransportError
from ..domain import Appointment, OutgoingEmail, describe_duration
from .context import ServiceContext

logger = logging.getLogger(__name__)


def _recipients(values: Optional[Iterable[str]]) -> list[str]:
    cleaned = []
    for value in values or ():
        address = value.strip()
        if not address:
            continue
        if "@" not in address:
            raise ValueError(f"Invalid email address: {address}")
        cleaned.append(address)
    return cleaned


def render_reminder(appointment: Appointment, offset: timedelta, *, prefix: str = "Reminder") -> tuple[str, str]:
    """Return ``(subject, body)`` for a reminder about ``appointment``."""

    lead = describe_duration(offset)
    subject = f"{prefix}: {appointment.title} in {lead}"
    lines = [
        f"This is a reminder that '{appointment.title}' starts in {lead}.",
        "",
        f"Starts: {appointment.starts_at.strftime('%A %d %B %Y, %H:%M %Z').strip()}",
        f"Ends: {appointment.ends_at.strftime('%A %d %B %Y, %H:%M %Z').strip()}",
    ]
    if appointment.location:
        lines.append(f"Location: {appointment.location}")
    if appointment.description:
        lines.extend(["", appointment.description])
    if appointment.html_link:
        lines.extend(["", f"Open in Google Calendar: {appointment.html_link}"])
    return subject, "\n".join(lines) + "\n"


@dataclass(slots=True)
class MailService:
    context: ServiceContext

    async def send_email(
        self,
        *,
        to: Iterable[str],
        subject: str,
        body: str,
        cc: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        recipients = _recipients(to)
        if not recipients:
            raise ValueError("At least one recipient is required")
        message = OutgoingEmail(
            to=recipients,
            subject=subject,
            body=body,
            cc=_recipients(cc),
            sender=self.context.settings.mail.sender,
        )
        response = await self.context.mail.send(message)
        logger.info("Email '%s' sent to %d recipient(s)", subject, len(recipients) + len(message.cc))
        return {"id": response.get("id"), "thread_id": response.get("threadId"), "to": recipients}

    async def send_reminder(self, appointment: Appointment, offset: timedelta) -> bool:
        """Notification port used by the reminder engine."""

        recipients = list(appointment.recipients)
        if not recipients and self.context.settings.mail.default_recipient:
            recipients = [self.context.settings.mail.default_recipient]
        if not recipients:
            raise NotificationRejected(f"Appointment {appointment.id} has no recipients")

        subject, body = render_reminder(appointment, offset, prefix=self.context.settings.mail.subject_prefix)
        try:
            await self.send_email(to=recipients, subject=subject, body=body)
        except ValueError as exc:
            raise NotificationRejected(str(exc)) from exc
        except GoogleRequestError as exc:
            if exc.is_client_error:
                raise NotificationRejected(str(exc)) from exc
            raise NotificationUnavailable(str(exc)) from exc
        except (GoogleNotConfiguredError, GoogleTransportError) as exc:
            raise NotificationUnavailable(str(exc)) from exc
        return True
