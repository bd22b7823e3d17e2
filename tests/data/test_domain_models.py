from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from gcal_mcp.domain import Appointment, AppointmentStatus, describe_duration, parse_datetime


def test_all_day_event_starts_at_midnight_utc() -> None:
    appointment = Appointment.from_google(
        {"id": "x", "summary": "Holiday", "start": {"date": "2026-04-01"}, "end": {"date": "2026-04-02"}}
    )

    assert appointment.all_day is True
    assert appointment.starts_at == datetime(2026, 4, 1, tzinfo=timezone.utc)


def test_declined_attendees_are_not_recipients() -> None:
    appointment = Appointment.from_google(
        {
            "id": "x",
            "start": {"dateTime": "2026-04-01T10:00:00+02:00"},
            "attendees": [
                {"email": "yes@example.com", "responseStatus": "accepted"},
                {"email": "no@example.com", "responseStatus": "declined"},
            ],
        }
    )

    assert appointment.recipients == ("yes@example.com",)
    assert appointment.title == "(untitled)"
    assert appointment.ends_at == appointment.starts_at


def test_organizer_is_the_fallback_recipient() -> None:
    appointment = Appointment.from_google(
        {
            "id": "x",
            "status": "tentative",
            "start": {"dateTime": "2026-04-01T10:00:00Z"},
            "organizer": {"email": "owner@example.com"},
        }
    )

    assert appointment.recipients == ("owner@example.com",)
    assert appointment.status is AppointmentStatus.TENTATIVE


def test_event_without_start_is_rejected() -> None:
    with pytest.raises(ValueError):
        Appointment.from_google({"id": "x"})


def test_naive_datetimes_are_treated_as_utc() -> None:
    assert parse_datetime("2026-04-01T10:00:00") == datetime(2026, 4, 1, 10, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("offset", "expected"),
    [
        (timedelta(hours=24), "1 day"),
        (timedelta(hours=1), "1 hour"),
        (timedelta(hours=2), "2 hours"),
        (timedelta(minutes=90), "90 minutes"),
        (timedelta(seconds=45), "45 seconds"),
    ],
)
def test_describe_duration(offset: timedelta, expected: str) -> None:
    assert describe_duration(offset) == expected
