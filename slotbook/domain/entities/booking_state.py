from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from slotbook.domain.entities.booking import Booking
from slotbook.domain.entities.slot import Slot
from slotbook.domain.entities.time_interval import Interval


class BookingPhase(str, Enum):
    idle = "idle"
    validating = "validating"
    submitting = "submitting"
    succeeded = "succeeded"
    failed = "failed"


@dataclass
class BookingViewState:
    """Derived, disposable projection of remote state for one session.

    Everything here is rebuilt by re-querying the backend; nothing is merged.
    """

    time_slots: list[Slot] = field(default_factory=list)  # generated grid for the selected date
    atomic_slots: list[Interval] = field(default_factory=list)  # bookable 15-minute slots
    booked_intervals: list[Interval] = field(default_factory=list)  # user's bookings that day, for display
    bookings: list[Booking] = field(default_factory=list)  # lead's bookings
    selected: Interval | None = None
    phase: BookingPhase = BookingPhase.idle
    last_error: str | None = None
    _generations: dict[str, int] = field(default_factory=dict, repr=False)

    def begin_fetch(self, kind: str) -> int:
        token = self._generations.get(kind, 0) + 1
        self._generations[kind] = token
        return token

    def is_current(self, kind: str, token: int) -> bool:
        return self._generations.get(kind, 0) == token

    def clear_availability(self) -> None:
        self.atomic_slots = []
        self.booked_intervals = []
        self.selected = None

    def find_slot(self, slot_id: str) -> Slot | None:
        for slot in self.time_slots:
            if slot.id == slot_id:
                return slot
        return None

    def replace_slot(self, updated: Slot) -> None:
        self.time_slots = [updated if slot.id == updated.id else slot for slot in self.time_slots]
