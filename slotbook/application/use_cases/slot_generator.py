from __future__ import annotations

from slotbook.application.utils.time_intervals import as_time_of_day
from slotbook.domain.entities.slot import Slot
from slotbook.domain.entities.time_interval import Interval

DEFAULT_GRANULARITY_MINUTES = 15


def generate_slots(
    date: str,
    business_start: int | str,
    business_end: int | str,
    granularity: int = DEFAULT_GRANULARITY_MINUTES,
) -> list[Slot]:
    """Fixed-size slots covering [business_start, business_end); no partial trailing slot."""
    if granularity <= 0:
        raise ValueError("granularity must be positive")

    start = as_time_of_day(business_start)
    end = as_time_of_day(business_end)

    slots: list[Slot] = []
    current = start
    while current + granularity <= end:
        slots.append(Slot(date=date, interval=Interval(current, current + granularity)))
        current += granularity
    return slots
