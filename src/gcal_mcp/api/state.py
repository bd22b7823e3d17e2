from __future__ import annotations

from dataclasses import dataclass, field

from ..automation import CalendarReminderService
from ..services import CalendarService, MailService, ServiceContext, build_reminder_service


@dataclass(slots=True)
class ApiState:
    context: ServiceContext = field(default_factory=ServiceContext)
    calendar: CalendarService = field(init=False)
    mail: MailService = field(init=False)
    reminders: CalendarReminderService = field(init=False)

    def __post_init__(self) -> None:
        self.calendar = CalendarService(self.context)
        self.mail = MailService(self.context)
        self.reminders = build_reminder_service(self.context)


api_state = ApiState()
