from __future__ import annotations

from typing import Any, Dict

from .registry import register_api
from .state import api_state


@register_api(
    "reminder_status",
    description="Report the reminder engine state: running flag, last tick and every tracked reminder (pending, fired, failed, missed).",
    category="reminders",
    tags=("reminders", "status"),
)
def reminder_status() -> Dict[str, Any]:
    return api_state.reminders.status()
