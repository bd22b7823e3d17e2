from __future__ import annotations

from dataclasses import dataclass, field

from ..config import AppSettings, get_settings
from ..data import GoogleGateway
from ..data.repositories import AppointmentRepository, MailRepository


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root for services to share settings, gateway, and repositories."""

    settings: AppSettings = field(default_factory=get_settings)
    gateway: GoogleGateway = field(init=False)
    appointments: AppointmentRepository = field(init=False)
    mail: MailRepository = field(init=False)

    def __post_init__(self) -> None:
        self.gateway = GoogleGateway(self.settings.google)
        self.appointments = AppointmentRepository(
            gateway=self.gateway,
            calendar_id=self.settings.google.calendar_id,
        )
        self.mail = MailRepository(gateway=self.gateway)

    async def aclose(self) -> None:
        await self.gateway.aclose()
