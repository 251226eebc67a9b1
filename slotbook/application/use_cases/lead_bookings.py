from __future__ import annotations

import logging
from dataclasses import replace

from slotbook.application.exceptions import TransportError
from slotbook.application.ports.booking_service import BookingServicePort
from slotbook.application.use_cases.slot_generator import generate_slots
from slotbook.application.utils.record_normalizer import normalize_booking
from slotbook.domain.entities.booking import Booking, BookingStatus
from slotbook.domain.entities.booking_context import BookingContext
from slotbook.domain.entities.booking_state import BookingViewState
from slotbook.domain.entities.slot import Slot

FETCH_KIND = "bookings"

_STATUS_RANK = {
    BookingStatus.scheduled: 1,
    BookingStatus.completed: 2,
    BookingStatus.cancelled: 3,
}


def sort_bookings(bookings: list[Booking]) -> list[Booking]:
    """Scheduled first, then completed, then cancelled; newest first within each group."""
    by_newest = sorted(bookings, key=lambda b: (b.date, b.interval.start), reverse=True)
    return sorted(by_newest, key=lambda b: _STATUS_RANK[b.status])


def mark_booked(slots: list[Slot], bookings: list[Booking]) -> list[Slot]:
    """Rebuild booked flags on the time grid from the given bookings alone."""
    by_start = {
        (b.date, b.interval.start): b for b in reversed(bookings) if b.status is not BookingStatus.cancelled
    }
    marked = []
    for slot in slots:
        booking = by_start.get((slot.date, slot.interval.start))
        if booking is None:
            marked.append(Slot(date=slot.date, interval=slot.interval))
            continue
        marked.append(
            replace(
                slot,
                is_booked=True,
                booking_id=booking.id,
                status=booking.status.value,
                booking_type=booking.booking_type,
                retry_count=booking.retry_count,
                user_id=booking.user_id,
                user_name=booking.user_name,
                user_email=booking.user_email,
            )
        )
    return marked


class LeadBookingsLoader:
    def __init__(self, service: BookingServicePort, granularity: int = 15) -> None:
        self._service = service
        self._granularity = granularity
        self._logger = logging.getLogger(__name__)

    def refresh(self, context: BookingContext, state: BookingViewState) -> bool:
        token = state.begin_fetch(FETCH_KIND)
        try:
            records = self._service.fetch_bookings(context.lead_id, context.date)
        except TransportError as e:
            if not state.is_current(FETCH_KIND, token):
                return False
            self._logger.error(
                "Error fetching booked slots",
                extra={"lead_id": context.lead_id, "date": context.date, "error": str(e)},
            )
            state.bookings = []
            state.time_slots = generate_slots(
                context.date,
                context.business_hours_start,
                context.business_hours_end,
                self._granularity,
            )
            state.last_error = str(e)
            return False

        if not state.is_current(FETCH_KIND, token):
            return False

        bookings = []
        for record in records:
            booking = normalize_booking(record, context.find_user)
            if booking is not None:
                bookings.append(booking)

        state.bookings = sort_bookings(bookings)
        state.time_slots = mark_booked(state.time_slots, state.bookings)
        self._logger.debug(
            "Bookings refreshed",
            extra={"lead_id": context.lead_id, "date": context.date, "booking_count": len(bookings)},
        )
        return True
