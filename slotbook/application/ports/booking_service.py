from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from slotbook.domain.entities.availability import AvailabilityCheck, AvailabilityWindow
from slotbook.domain.entities.booking import BookingRequest


class BookingServicePort(ABC):
    @abstractmethod
    def fetch_bookings(self, lead_id: str, date: str | None = None) -> list[dict[str, Any]]:
        """Return the lead's non-cancelled booking records, optionally for one date."""
        raise NotImplementedError

    @abstractmethod
    def fetch_availability(
        self,
        user_id: str,
        date: str,
        slot_minutes: int,
        timezone: str,
        business_hours_start: str,
        business_hours_end: str,
    ) -> AvailabilityWindow:
        """Primary availability lookup keyed by date and business hours."""
        raise NotImplementedError

    @abstractmethod
    def fetch_booking_availability(
        self,
        user_id: str,
        day_start: str,
        day_end: str,
        slot_minutes: int,
        timezone: str,
    ) -> AvailabilityWindow:
        """Fallback availability lookup keyed by an explicit timestamp window."""
        raise NotImplementedError

    @abstractmethod
    def check_availability(self, user_id: str, date: str, start_time: str, end_time: str) -> AvailabilityCheck:
        """Ask the backend whether [start_time, end_time) is still free for the user."""
        raise NotImplementedError

    @abstractmethod
    def create_booking(self, request: BookingRequest) -> str:
        """Create a booking. Returns booking id."""
        raise NotImplementedError

    @abstractmethod
    def cancel_booking(self, booking_id: str) -> None:
        """Cancel a booking. Raises on failure."""
        raise NotImplementedError

    @abstractmethod
    def add_lead_note(self, lead_id: str, content: str) -> None:
        """Attach a free-text note to a lead."""
        raise NotImplementedError
