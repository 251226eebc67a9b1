from __future__ import annotations

from typing import Iterable

from slotbook.application.utils.time_intervals import contains, normalize_end
from slotbook.domain.entities.time_interval import Interval


def is_bookable(candidate: Interval | None, atomic_slots: Iterable[Interval]) -> bool:
    """True only when the candidate sits entirely inside one atomic slot."""
    if candidate is None or candidate.start < 0 or candidate.end < 0:
        return False

    wanted = Interval(candidate.start, normalize_end(candidate.start, candidate.end))
    if not wanted.is_proper:
        return False

    for slot in atomic_slots:
        available = Interval(slot.start, normalize_end(slot.start, slot.end))
        if contains(available, wanted):
            return True
    return False
