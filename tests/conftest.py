import pytest

from slotbook.domain.entities.booking_context import BookingContext, Counsellor
from slotbook.infrastructure.bookings.mock_booking_service import MockBookingService
from slotbook.wiring.dependencies import build_session


@pytest.fixture
def day():
    return "2025-03-10"


@pytest.fixture
def service(day):
    svc = MockBookingService()
    svc.set_availability("u1", day, [("10:00", "11:00")])
    return svc


@pytest.fixture
def context(day):
    return BookingContext(
        lead_id="lead-1",
        date=day,
        user_id="u1",
        tenant_id="tenant-1",
        created_by="agent-1",
        users=(Counsellor(id="u1", name="Dana", email="dana@example.com"),),
    )


@pytest.fixture
def session(service, context):
    return build_session(context, service=service)
