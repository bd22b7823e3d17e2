"""Google API repositories for first-class domain objects."""

from __future__ import annotations

from .appointments import AppointmentRepository
from .mail import MailRepository

__all__ = ["AppointmentRepository", "MailRepository"]
