from __future__ import annotations

from dataclasses import dataclass

from slotbook.domain.entities.time_interval import Interval


def slot_id(date: str, interval: Interval) -> str:
    return f"{date}-{interval.start_time}"


@dataclass(frozen=True)
class Slot:
    date: str  # YYYY-MM-DD
    interval: Interval
    is_booked: bool = False
    # Display fields copied from the booking occupying this slot
    booking_id: str | None = None
    status: str | None = None
    booking_type: str | None = None
    retry_count: int = 0
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None

    @property
    def id(self) -> str:
        return slot_id(self.date, self.interval)

    @property
    def start_time(self) -> str:
        return self.interval.start_time

    @property
    def end_time(self) -> str:
        return self.interval.end_time
