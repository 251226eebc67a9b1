from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from slotbook.application.exceptions import TransportError
from slotbook.application.ports.booking_service import BookingServicePort
from slotbook.application.use_cases.availability import AvailabilityReconciler
from slotbook.application.use_cases.lead_bookings import LeadBookingsLoader
from slotbook.domain.entities.booking import BookingStatus
from slotbook.domain.entities.booking_context import BookingContext
from slotbook.domain.entities.booking_state import BookingViewState
from slotbook.domain.entities.slot import Slot


@dataclass(frozen=True)
class CancellationResult:
    action: str  # "cancelled", "failed"
    message: str
    level: str
    booking_id: str | None = None


class CancellationOrchestrator:
    def __init__(
        self,
        service: BookingServicePort,
        reconciler: AvailabilityReconciler,
        bookings_loader: LeadBookingsLoader,
    ) -> None:
        self._service = service
        self._reconciler = reconciler
        self._bookings_loader = bookings_loader
        self._logger = logging.getLogger(__name__)

    def cancel(self, context: BookingContext, state: BookingViewState, booking_id: str) -> CancellationResult:
        booking_id = str(booking_id)
        try:
            self._service.cancel_booking(booking_id)
        except TransportError as e:
            self._logger.error("Error cancelling booking", extra={"booking_id": booking_id, "error": str(e)})
            return CancellationResult(
                action="failed",
                message=str(e) or "Failed to cancel booking. Please try again.",
                level="error",
                booking_id=booking_id,
            )

        self._release_locally(state, booking_id)

        self._bookings_loader.refresh(context, state)
        if context.user_id and context.date:
            self._reconciler.refresh(context, state)

        self._logger.info("Booking cancelled", extra={"booking_id": booking_id, "lead_id": context.lead_id})
        return CancellationResult(
            action="cancelled",
            message="Booking cancelled successfully!",
            level="success",
            booking_id=booking_id,
        )

    def _release_locally(self, state: BookingViewState, booking_id: str) -> None:
        cancelled = None
        bookings = []
        for booking in state.bookings:
            if booking.id == booking_id:
                cancelled = booking
                booking = replace(booking, status=BookingStatus.cancelled)
            bookings.append(booking)
        state.bookings = bookings

        def occupied_by_cancelled(slot: Slot) -> bool:
            if slot.booking_id == booking_id or slot.id == booking_id:
                return True
            return cancelled is not None and (slot.date, slot.interval.start) == (
                cancelled.date,
                cancelled.interval.start,
            )

        state.time_slots = [
            Slot(date=slot.date, interval=slot.interval) if occupied_by_cancelled(slot) else slot
            for slot in state.time_slots
        ]
