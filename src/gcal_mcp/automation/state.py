from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import orjson

from ..domain import Appointment, ReminderStatus, parse_datetime

logger = logging.getLogger(__name__)

ReminderKey = Tuple[str, timedelta]


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(slots=True)
class ReminderRecord:
    appointment_id: str
    offset: timedelta
    starts_at: datetime
    first_seen_at: datetime
    fired: bool = False
    fired_at: Optional[datetime] = None
    attempts: int = 0
    permanently_failed: bool = False
    missed: bool = False
    last_error: Optional[str] = None

    @property
    def key(self) -> ReminderKey:
        return (self.appointment_id, self.offset)

    @property
    def due_at(self) -> datetime:
        return self.starts_at - self.offset

    @property
    def status(self) -> ReminderStatus:
        if self.fired:
            return ReminderStatus.FIRED
        if self.permanently_failed:
            return ReminderStatus.FAILED
        if self.missed:
            return ReminderStatus.MISSED
        return ReminderStatus.PENDING

    @property
    def is_settled(self) -> bool:
        """True once no further dispatch may happen for this key."""

        return self.fired or self.permanently_failed or self.missed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "appointment_id": self.appointment_id,
            "offset_seconds": int(self.offset.total_seconds()),
            "starts_at": _iso(self.starts_at),
            "due_at": _iso(self.due_at),
            "first_seen_at": _iso(self.first_seen_at),
            "status": self.status.value,
            "fired": self.fired,
            "fired_at": _iso(self.fired_at),
            "attempts": self.attempts,
            "permanently_failed": self.permanently_failed,
            "missed": self.missed,
            "last_error": self.last_error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReminderRecord":
        return cls(
            appointment_id=str(data["appointment_id"]),
            offset=timedelta(seconds=int(data["offset_seconds"])),
            starts_at=parse_datetime(data["starts_at"]),
            first_seen_at=parse_datetime(data["first_seen_at"]),
            fired=bool(data.get("fired", False)),
            fired_at=parse_datetime(data["fired_at"]) if data.get("fired_at") else None,
            attempts=int(data.get("attempts", 0)),
            permanently_failed=bool(data.get("permanently_failed", False)),
            missed=bool(data.get("missed", False)),
            last_error=data.get("last_error"),
        )


class ReminderStateStore:
    """Per (appointment, offset) reminder bookkeeping.

    Records are created lazily by :meth:`observe` and purged once their
    appointment is older than the retention margin. When ``path`` is given
    the records are loaded from, and flushed to, a JSON snapshot.
    """

    def __init__(self, *, retention: timedelta = timedelta(hours=24), path: Optional[Path] = None) -> None:
        self.retention = retention
        self._path = path
        self._records: Dict[ReminderKey, ReminderRecord] = {}
        self._dirty = False
        if path is not None:
            self._load()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ReminderRecord]:
        return iter(list(self._records.values()))

    # Lookups ------------------------------------------------------------
    def get(self, appointment_id: str, offset: timedelta) -> Optional[ReminderRecord]:
        return self._records.get((appointment_id, offset))

    def is_fired(self, appointment_id: str, offset: timedelta) -> bool:
        record = self._records.get((appointment_id, offset))
        return bool(record and record.fired)

    def records(self) -> List[ReminderRecord]:
        return sorted(self._records.values(), key=lambda item: (item.due_at, item.appointment_id))

    def summary(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in ReminderStatus}
        for record in self._records.values():
            counts[record.status.value] += 1
        return counts

    # Mutations ----------------------------------------------------------
    def observe(self, appointment: Appointment, offset: timedelta, now: datetime) -> ReminderRecord:
        key = (appointment.id, offset)
        record = self._records.get(key)
        if record is None:
            record = ReminderRecord(
                appointment_id=appointment.id,
                offset=offset,
                starts_at=appointment.starts_at,
                first_seen_at=now,
            )
            self._records[key] = record
            self._dirty = True
        elif record.starts_at != appointment.starts_at and not record.is_settled:
            # Rescheduled before the reminder went out; evaluate against the new start.
            record.starts_at = appointment.starts_at
            self._dirty = True
        return record

    def mark_fired(self, appointment_id: str, offset: timedelta, at: datetime) -> Optional[ReminderRecord]:
        record = self._records.get((appointment_id, offset))
        if record is None or record.fired:
            return record
        record.fired = True
        record.fired_at = at
        record.attempts += 1
        record.last_error = None
        self._dirty = True
        return record

    def record_attempt(
        self,
        appointment_id: str,
        offset: timedelta,
        *,
        max_attempts: Optional[int] = None,
        error: Optional[str] = None,
    ) -> Optional[ReminderRecord]:
        record = self._records.get((appointment_id, offset))
        if record is None or record.is_settled:
            return record
        record.attempts += 1
        record.last_error = error
        if max_attempts is not None and record.attempts >= max_attempts:
            record.permanently_failed = True
        self._dirty = True
        return record

    def mark_failed(self, appointment_id: str, offset: timedelta, *, error: Optional[str] = None) -> Optional[ReminderRecord]:
        record = self._records.get((appointment_id, offset))
        if record is None or record.fired:
            return record
        record.permanently_failed = True
        if error:
            record.last_error = error
        self._dirty = True
        return record

    def mark_missed(self, appointment_id: str, offset: timedelta) -> Optional[ReminderRecord]:
        record = self._records.get((appointment_id, offset))
        if record is None or record.is_settled:
            return record
        record.missed = True
        self._dirty = True
        return record

    def forget(self, appointment_id: str) -> int:
        keys = [key for key in self._records if key[0] == appointment_id]
        for key in keys:
            del self._records[key]
        if keys:
            self._dirty = True
        return len(keys)

    def purge_expired(self, before: datetime) -> int:
        cutoff = before - self.retention
        expired = [key for key, record in self._records.items() if record.starts_at < cutoff]
        for key in expired:
            del self._records[key]
        if expired:
            self._dirty = True
            logger.debug("Purged %d expired reminder records", len(expired))
        return len(expired)

    def clear(self) -> None:
        if self._records:
            self._records.clear()
            self._dirty = True

    # Persistence --------------------------------------------------------
    def _load(self) -> None:
        assert self._path is not None
        if not self._path.exists():
            return
        raw = self._path.read_bytes()
        if not raw.strip():
            return
        try:
            data = orjson.loads(raw)
            records = [ReminderRecord.from_dict(item) for item in data.get("records", [])]
        except (orjson.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring unreadable reminder state file %s: %s", self._path, exc)
            return
        self._records = {record.key: record for record in records}
        logger.info("Loaded %d reminder records from %s", len(self._records), self._path)

    def flush(self) -> None:
        if self._path is None or not self._dirty:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = orjson.dumps(
            {"records": [record.to_dict() for record in self.records()]},
            option=orjson.OPT_INDENT_2,
        )
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_bytes(payload + b"\n")
        tmp_path.replace(self._path)
        self._dirty = False
