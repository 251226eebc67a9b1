from __future__ import annotations

import logging
from typing import Any, Callable

from slotbook.application.exceptions import EndpointUnsupportedError, TransportError
from slotbook.application.ports.booking_service import BookingServicePort
from slotbook.application.utils.time_intervals import make_interval
from slotbook.domain.entities.availability import AvailabilityCheck, AvailabilityWindow
from slotbook.domain.entities.booking import BookingRequest
from slotbook.domain.entities.time_interval import Interval


class MockBookingService(BookingServicePort):
    """In-memory stand-in for the bookings backend.

    Availability is stored as coarse ranges per (user, date); booked time is
    subtracted when availability is read, the way the real backend does.
    """

    def __init__(self, default_ranges: list[tuple[str, str]] | None = None) -> None:
        self._default_ranges = list(default_ranges or [])
        self._ranges: dict[tuple[str, str], list[tuple[str, str]]] = {}
        self._bookings: dict[str, dict[str, Any]] = {}
        self.notes: dict[str, list[str]] = {}
        self.calls: list[str] = []
        self.unsupported: set[str] = set()
        self.failures: dict[str, Exception] = {}
        self.on_call: Callable[[str], None] | None = None
        self._logger = logging.getLogger(__name__)

    def set_availability(self, user_id: str, date: str, ranges: list[tuple[str, str]]) -> None:
        self._ranges[(str(user_id), date)] = list(ranges)

    def add_booking_record(self, record: dict[str, Any]) -> str:
        booking_id = str(record.get("id") or f"mock_booking_{len(self._bookings) + 1}")
        self._bookings[booking_id] = {**record, "id": booking_id}
        return booking_id

    def get_booking(self, booking_id: str) -> dict[str, Any] | None:
        return self._bookings.get(booking_id)

    def count(self, operation: str) -> int:
        return self.calls.count(operation)

    def fetch_bookings(self, lead_id: str, date: str | None = None) -> list[dict[str, Any]]:
        self._enter("bookings")
        records = []
        for record in self._bookings.values():
            if str(record.get("lead_id")) != str(lead_id):
                continue
            if date and record.get("booking_date") != date:
                continue
            if record.get("status") == "cancelled":
                continue
            records.append(dict(record))
        return records

    def fetch_availability(
        self,
        user_id: str,
        date: str,
        slot_minutes: int,
        timezone: str,
        business_hours_start: str,
        business_hours_end: str,
    ) -> AvailabilityWindow:
        self._enter("availability")
        free, booked = self._free_and_booked(user_id, date)
        return AvailabilityWindow(
            user_id=user_id,
            date=date,
            ranges=[{"start": i.start_time, "end": i.end_time} for i in free],
            bookings=[{"start": i.start_time, "end": i.end_time} for i in booked],
            source="availability",
        )

    def fetch_booking_availability(
        self,
        user_id: str,
        day_start: str,
        day_end: str,
        slot_minutes: int,
        timezone: str,
    ) -> AvailabilityWindow:
        self._enter("booking-availability")
        date = day_start[:10]
        free, booked = self._free_and_booked(user_id, date)
        return AvailabilityWindow(
            user_id=user_id,
            date=date,
            ranges=[
                {"startTime": f"{date}T{i.start_time}:00Z", "endTime": f"{date}T{i.end_time}:00Z"} for i in free
            ],
            bookings=[{"start_time": i.start_time, "end_time": i.end_time} for i in booked],
            source="booking-availability",
        )

    def check_availability(self, user_id: str, date: str, start_time: str, end_time: str) -> AvailabilityCheck:
        self._enter("check")
        wanted = make_interval(start_time, end_time)
        for interval in self._booked_for(user_id, date):
            if interval.start < wanted.end and wanted.start < interval.end:
                return AvailabilityCheck(available=False, message="This slot is no longer available")
        return AvailabilityCheck(available=True)

    def create_booking(self, request: BookingRequest) -> str:
        self._enter("create")
        for interval in self._booked_for(request.user_id, request.date):
            if interval.start < request.interval.end and request.interval.start < interval.end:
                raise TransportError("This slot is already booked", status_code=409)

        booking_id = self.add_booking_record(
            {
                "tenant_id": request.tenant_id,
                "student_id": request.student_id,
                "lead_id": request.lead_id,
                "counsellor_id": request.user_id,
                "assigned_user_id": request.assigned_user_id,
                "booking_type": request.booking_type,
                "booking_source": request.booking_source,
                "booking_date": request.date,
                "scheduled_at": request.scheduled_at,
                "buffer_until": f"{request.date}T{request.interval.end_time}:00Z",
                "created_by": request.created_by,
                "timezone": request.timezone,
                "status": "scheduled",
                "retry_count": 0,
            }
        )
        self._logger.info("Mock booking created", extra={"booking_id": booking_id, "date": request.date})
        return booking_id

    def cancel_booking(self, booking_id: str) -> None:
        self._enter("cancel")
        record = self._bookings.get(str(booking_id))
        if record is None:
            raise TransportError("Booking not found", status_code=404)
        record["status"] = "cancelled"
        self._logger.info("Mock booking cancelled", extra={"booking_id": booking_id})

    def add_lead_note(self, lead_id: str, content: str) -> None:
        self._enter("note")
        self.notes.setdefault(str(lead_id), []).append(content)

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if self.on_call:
            self.on_call(operation)
        if operation in self.unsupported:
            raise EndpointUnsupportedError(f"{operation} endpoint not supported", status_code=404)
        failure = self.failures.get(operation)
        if failure is not None:
            raise failure

    def _booked_for(self, user_id: str, date: str) -> list[Interval]:
        booked = []
        for record in self._bookings.values():
            if record.get("status") == "cancelled":
                continue
            if str(record.get("counsellor_id")) != str(user_id) or record.get("booking_date") != date:
                continue
            booked.append(make_interval(record["scheduled_at"], record["buffer_until"]))
        return sorted(booked, key=lambda i: i.start)

    def _free_and_booked(self, user_id: str, date: str) -> tuple[list[Interval], list[Interval]]:
        raw = self._ranges.get((str(user_id), date), self._default_ranges)
        booked = self._booked_for(user_id, date)
        free: list[Interval] = []
        for start, end in raw:
            free.extend(_subtract(make_interval(start, end), booked))
        return free, booked


def _subtract(base: Interval, booked: list[Interval]) -> list[Interval]:
    pieces = [base]
    for cut in booked:
        next_pieces = []
        for piece in pieces:
            if cut.end <= piece.start or cut.start >= piece.end:
                next_pieces.append(piece)
                continue
            if cut.start > piece.start:
                next_pieces.append(Interval(piece.start, cut.start))
            if cut.end < piece.end:
                next_pieces.append(Interval(cut.end, piece.end))
        pieces = next_pieces
    return pieces
