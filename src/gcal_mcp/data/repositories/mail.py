from __future__ import annotations

import base64
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Any, Dict

from ...domain import OutgoingEmail
from ..google import GMAIL_API_BASE_URL, GoogleGateway


def build_mime(message: OutgoingEmail) -> EmailMessage:
    mime = EmailMessage()
    mime["To"] = ", ".join(message.to)
    if message.cc:
        mime["Cc"] = ", ".join(message.cc)
    if message.sender:
        mime["From"] = message.sender
    mime["Subject"] = message.subject
    mime.set_content(message.body)
    return mime


@dataclass(slots=True)
class MailRepository:
    gateway: GoogleGateway
    user_id: str = "me"

    async def send(self, message: OutgoingEmail) -> Dict[str, Any]:
        raw = base64.urlsafe_b64encode(build_mime(message).as_bytes()).decode("ascii")
        return await self.gateway.request_json(
            "POST",
            f"{GMAIL_API_BASE_URL}/users/{self.user_id}/messages/send",
            json_body={"raw": raw},
        )
