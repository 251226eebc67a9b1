from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from slotbook.application.exceptions import ConflictError, TransportError, ValidationError
from slotbook.application.ports.booking_service import BookingServicePort
from slotbook.application.use_cases.availability import AvailabilityReconciler
from slotbook.application.use_cases.booking_validator import is_bookable
from slotbook.application.use_cases.lead_bookings import LeadBookingsLoader
from slotbook.application.use_cases.slot_generator import generate_slots
from slotbook.domain.entities.availability import AvailabilityCheck
from slotbook.domain.entities.booking import BookingRequest
from slotbook.domain.entities.booking_context import BookingContext
from slotbook.domain.entities.booking_state import BookingPhase, BookingViewState
from slotbook.domain.entities.slot import slot_id
from slotbook.domain.entities.time_interval import Interval

CONFLICT_KEYWORDS = ("unavailable", "already booked", "buffer period")


@dataclass(frozen=True)
class BookingResult:
    action: str  # "booked", "invalid", "conflict", "failed"
    message: str
    level: str  # "success", "warning", "error"
    booking_id: str | None = None
    note_saved: bool | None = None


def classify_booking_error(error: TransportError) -> TransportError | ConflictError:
    """A rejection naming a time clash is a conflict; everything else stays a transport error."""
    message = str(error).lower()
    if error.status_code == 409 or any(keyword in message for keyword in CONFLICT_KEYWORDS):
        return ConflictError(str(error), status_code=error.status_code)
    return error


class BookingOrchestrator:
    def __init__(
        self,
        service: BookingServicePort,
        reconciler: AvailabilityReconciler,
        bookings_loader: LeadBookingsLoader,
        booking_source: str = "user_ui",
        granularity: int = 15,
    ) -> None:
        self._service = service
        self._reconciler = reconciler
        self._bookings_loader = bookings_loader
        self._booking_source = booking_source
        self._granularity = granularity
        self._logger = logging.getLogger(__name__)

    def book(
        self,
        context: BookingContext,
        state: BookingViewState,
        candidate: Interval | None = None,
        note: str | None = None,
    ) -> BookingResult:
        if state.phase is BookingPhase.submitting:
            return BookingResult(
                action="invalid",
                message="A booking is already being submitted. Please wait.",
                level="warning",
            )

        candidate = candidate or state.selected
        state.phase = BookingPhase.validating
        try:
            request = self._build_request(context, state, candidate)
        except ValidationError as e:
            state.phase = BookingPhase.idle
            self._logger.info("Booking rejected before submit", extra={"lead_id": context.lead_id, "reason": str(e)})
            return BookingResult(action="invalid", message=str(e), level=e.level)

        check = self._check_availability(context, request)
        if not check.available:
            state.phase = BookingPhase.idle
            self._logger.info(
                "Slot no longer available before submit",
                extra={"lead_id": context.lead_id, "user_id": context.user_id, "date": context.date},
            )
            self._bookings_loader.refresh(context, state)
            self._reconciler.refresh(context, state)
            return BookingResult(
                action="conflict",
                message=check.message or "Slot is no longer available. Please select another time.",
                level="warning",
            )

        state.phase = BookingPhase.submitting
        try:
            booking_id = self._service.create_booking(request)
        except TransportError as e:
            return self._handle_failure(context, state, classify_booking_error(e))
        except Exception as e:
            return self._handle_failure(
                context, state, TransportError(str(e) or "Failed to book slot. Please try again.")
            )

        state.phase = BookingPhase.succeeded
        self._mark_slot_booked(context, state, request, booking_id)

        # Server state supersedes the optimistic mark above.
        self._bookings_loader.refresh(context, state)
        self._reconciler.refresh(context, state)

        note_saved = self._save_note(context, note)

        user = context.find_user(context.user_id)
        return BookingResult(
            action="booked",
            message=(
                f"Booking confirmed with {user.name if user and user.name else 'User'} on {context.date} "
                f"from {request.interval.start_time} to {request.interval.end_time}"
            ),
            level="success",
            booking_id=booking_id,
            note_saved=note_saved,
        )

    def _build_request(
        self,
        context: BookingContext,
        state: BookingViewState,
        candidate: Interval | None,
    ) -> BookingRequest:
        if not context.user_id:
            raise ValidationError("Please select a user first", level="warning")
        if not context.tenant_id:
            raise ValidationError("Organization ID is missing. Cannot create booking.")
        if not context.created_by:
            raise ValidationError("Created by user ID is missing. Cannot create booking.")
        if not context.lead_id:
            raise ValidationError("Lead ID is missing. Cannot create booking.")
        if candidate is None:
            raise ValidationError("Please select a time slot first", level="warning")
        if not is_bookable(candidate, state.atomic_slots):
            raise ValidationError(
                "This time range is not within available slots. Please select a different time.",
                level="warning",
            )

        return BookingRequest(
            lead_id=str(context.lead_id),
            user_id=str(context.user_id),
            date=context.date,
            interval=candidate,
            tenant_id=context.tenant_id,
            created_by=context.created_by,
            assigned_user_id=context.assigned_user_id or context.created_by,
            student_id=context.student_id or str(context.lead_id),
            booking_type=context.booking_type,
            booking_source=self._booking_source,
            timezone=context.timezone,
        )

    def _check_availability(self, context: BookingContext, request: BookingRequest) -> AvailabilityCheck:
        # Best-effort; a failed check falls through to submit.
        try:
            return self._service.check_availability(
                request.user_id,
                request.date,
                request.interval.start_time,
                request.interval.end_time,
            )
        except Exception as e:
            self._logger.warning(
                "Availability check failed, proceeding with booking",
                extra={"lead_id": context.lead_id, "user_id": context.user_id, "error": str(e)},
            )
            return AvailabilityCheck(available=True)

    def _mark_slot_booked(
        self,
        context: BookingContext,
        state: BookingViewState,
        request: BookingRequest,
        booking_id: str,
    ) -> None:
        user = context.find_user(request.user_id)
        current = state.find_slot(slot_id(request.date, request.interval))
        if current is None:
            return
        state.replace_slot(
            replace(
                current,
                is_booked=True,
                booking_id=booking_id,
                user_id=request.user_id,
                user_name=user.name if user else "",
                user_email=user.email if user else "",
            )
        )

    def _save_note(self, context: BookingContext, note: str | None) -> bool | None:
        if not note or not note.strip():
            return None
        try:
            self._service.add_lead_note(str(context.lead_id), note.strip())
            return True
        except Exception as e:
            self._logger.warning(
                "Booking succeeded but failed to save note",
                extra={"lead_id": context.lead_id, "error": str(e)},
            )
            return False

    def _handle_failure(
        self,
        context: BookingContext,
        state: BookingViewState,
        error: TransportError | ConflictError,
    ) -> BookingResult:
        state.phase = BookingPhase.failed
        message = str(error) or "Failed to book slot. Please try again."
        state.last_error = message
        is_conflict = isinstance(error, ConflictError)
        self._logger.log(
            logging.WARNING if is_conflict else logging.ERROR,
            "Error booking slot",
            extra={"lead_id": context.lead_id, "user_id": context.user_id, "error": str(error)},
        )

        state.time_slots = generate_slots(
            context.date,
            context.business_hours_start,
            context.business_hours_end,
            self._granularity,
        )
        self._bookings_loader.refresh(context, state)
        self._reconciler.refresh(context, state)

        return BookingResult(
            action="conflict" if is_conflict else "failed",
            message=message,
            level="warning" if is_conflict else "error",
        )
