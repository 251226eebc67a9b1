from __future__ import annotations

import logging
from dataclasses import dataclass

from slotbook.application.use_cases.availability import AvailabilityReconciler, AvailabilityResult
from slotbook.application.use_cases.booking import BookingOrchestrator, BookingResult
from slotbook.application.use_cases.booking_validator import is_bookable
from slotbook.application.use_cases.cancellation import CancellationOrchestrator, CancellationResult
from slotbook.application.use_cases.lead_bookings import LeadBookingsLoader
from slotbook.application.use_cases.slot_generator import generate_slots
from slotbook.application.utils.time_intervals import make_interval
from slotbook.domain.entities.booking import Booking
from slotbook.domain.entities.booking_context import BookingContext
from slotbook.domain.entities.booking_state import BookingPhase, BookingViewState
from slotbook.domain.entities.slot import Slot
from slotbook.domain.entities.time_interval import Interval


@dataclass(frozen=True)
class SessionSnapshot:
    context: BookingContext
    time_slots: tuple[Slot, ...]
    atomic_slots: tuple[Interval, ...]
    booked_intervals: tuple[Interval, ...]
    bookings: tuple[Booking, ...]
    selected: Interval | None
    can_book: bool
    phase: BookingPhase
    last_error: str | None


class BookingSession:
    """Owns the active booking context and the state derived from it."""

    def __init__(
        self,
        context: BookingContext,
        reconciler: AvailabilityReconciler,
        bookings_loader: LeadBookingsLoader,
        orchestrator: BookingOrchestrator,
        cancellation: CancellationOrchestrator,
        granularity: int = 15,
        state: BookingViewState | None = None,
    ) -> None:
        self._context = context
        self._reconciler = reconciler
        self._bookings_loader = bookings_loader
        self._orchestrator = orchestrator
        self._cancellation = cancellation
        self._granularity = granularity
        self._state = state or BookingViewState()
        self._logger = logging.getLogger(__name__)

    @property
    def context(self) -> BookingContext:
        return self._context

    @property
    def state(self) -> BookingViewState:
        return self._state

    def load(self) -> AvailabilityResult:
        """Regenerate the time grid, then pull bookings and availability for the active context."""
        self._state.time_slots = generate_slots(
            self._context.date,
            self._context.business_hours_start,
            self._context.business_hours_end,
            self._granularity,
        )
        self._bookings_loader.refresh(self._context, self._state)
        return self._reconciler.refresh(self._context, self._state)

    def select_user(self, user_id: str) -> AvailabilityResult:
        self._context = self._context.with_selection(user_id=str(user_id))
        return self.load()

    def select_date(self, date: str) -> AvailabilityResult:
        self._context = self._context.with_selection(date=date)
        return self.load()

    def set_business_hours(self, start: str, end: str) -> AvailabilityResult:
        make_interval(start, end)  # raises FormatError on bad input
        self._context = self._context.with_business_hours(start, end)
        return self.load()

    def select_time(self, start: int | str, end: int | str) -> bool:
        self._state.selected = make_interval(start, end)
        return self.can_book()

    def can_book(self) -> bool:
        if self._state.phase is BookingPhase.submitting:
            return False
        return is_bookable(self._state.selected, self._state.atomic_slots)

    def book(self, note: str | None = None) -> BookingResult:
        return self._orchestrator.book(self._context, self._state, note=note)

    def cancel(self, booking_id: str) -> CancellationResult:
        return self._cancellation.cancel(self._context, self._state, booking_id)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            context=self._context,
            time_slots=tuple(self._state.time_slots),
            atomic_slots=tuple(self._state.atomic_slots),
            booked_intervals=tuple(self._state.booked_intervals),
            bookings=tuple(self._state.bookings),
            selected=self._state.selected,
            can_book=self.can_book(),
            phase=self._state.phase,
            last_error=self._state.last_error,
        )
