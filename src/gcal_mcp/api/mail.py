from __future__ import annotations

from typing import Any, Dict, List, Optional

from .registry import register_api
from .state import api_state


@register_api(
    "send_email",
    description="Send a plain-text email from the connected Google account.",
    category="email",
    tags=("email", "write"),
)
async def send_email(to: List[str], subject: str, body: str, cc: Optional[List[str]] = None) -> Dict[str, Any]:
    if not api_state.context.gateway.is_ready():
        raise RuntimeError("GOOGLE_ACCESS_TOKEN is not set. Configure Google credentials before sending email.")
    result = await api_state.mail.send_email(to=to, subject=subject, body=body, cc=cc)
    return {"sent": True, **result}
