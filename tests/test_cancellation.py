from __future__ import annotations

from dataclasses import replace

from slotbook.application.use_cases.availability import AvailabilityReconciler
from slotbook.application.use_cases.cancellation import CancellationOrchestrator
from slotbook.application.use_cases.lead_bookings import LeadBookingsLoader
from slotbook.domain.entities.booking import BookingStatus
from slotbook.domain.entities.time_interval import Interval


def test_cancel_releases_slot_and_restores_availability(session, service, day):
    session.load()
    booked = session.book()
    assert Interval(600, 615) not in session.state.atomic_slots

    result = session.cancel(booked.booking_id)

    assert result.action == "cancelled"
    assert result.level == "success"
    assert result.message == "Booking cancelled successfully!"
    assert service.get_booking(booked.booking_id)["status"] == "cancelled"

    slot = session.state.find_slot(f"{day}-10:00")
    assert slot.is_booked is False
    assert slot.booking_id is None
    assert session.state.bookings == []
    assert Interval(600, 615) in session.state.atomic_slots


def test_failed_cancel_leaves_state_untouched(session, service):
    session.load()
    session.book()
    before = session.snapshot()
    bookings_calls = service.count("bookings")

    result = session.cancel("no-such-booking")

    assert result.action == "failed"
    assert result.level == "error"
    assert result.message == "Booking not found"
    assert session.snapshot() == before
    assert service.count("bookings") == bookings_calls


def test_local_release_holds_when_refresh_is_superseded(session, service, day):
    """If a newer bookings fetch takes over, the locally released state is what remains."""
    session.load()
    booked = session.book()

    def start_newer_fetch(operation):
        if operation == "bookings":
            session.state.begin_fetch("bookings")

    service.on_call = start_newer_fetch
    session.cancel(booked.booking_id)

    assert session.state.find_slot(f"{day}-10:00").is_booked is False
    assert [b.status for b in session.state.bookings] == [BookingStatus.cancelled]


def test_availability_is_not_refreshed_without_a_selected_user(session, service):
    session.load()
    booked = session.book()
    availability_calls = service.count("availability")

    cancellation = CancellationOrchestrator(service, AvailabilityReconciler(service), LeadBookingsLoader(service))
    result = cancellation.cancel(replace(session.context, user_id=None), session.state, booked.booking_id)

    assert result.action == "cancelled"
    assert service.count("availability") == availability_calls
