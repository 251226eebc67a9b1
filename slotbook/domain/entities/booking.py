from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from slotbook.domain.entities.time_interval import Interval


class BookingStatus(str, Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"

    @classmethod
    def from_raw(cls, value: object) -> "BookingStatus":
        normalized = str(value or "").strip().lower()
        if normalized in {"cancelled", "canceled"}:
            return cls.cancelled
        if normalized == "completed":
            return cls.completed
        return cls.scheduled


@dataclass(frozen=True)
class Booking:
    id: str
    date: str
    interval: Interval
    status: BookingStatus = BookingStatus.scheduled
    booking_type: str = ""
    booking_source: str = ""
    retry_count: int = 0
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    tenant_id: str | None = None
    student_id: str | None = None
    lead_id: str | None = None
    created_by: str | None = None
    timezone: str | None = None


@dataclass(frozen=True)
class BookingRequest:
    lead_id: str
    user_id: str
    date: str
    interval: Interval
    tenant_id: str
    created_by: str
    assigned_user_id: str
    student_id: str
    booking_type: str
    booking_source: str
    timezone: str | None = None

    @property
    def scheduled_at(self) -> str:
        # The backend expects wall-clock time with a literal "Z"; no UTC conversion happens here.
        return f"{self.date}T{self.interval.start_time}:00Z"
