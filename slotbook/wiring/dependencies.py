from functools import lru_cache
import logging

from slotbook.application.ports.booking_service import BookingServicePort
from slotbook.application.use_cases.availability import AvailabilityReconciler
from slotbook.application.use_cases.booking import BookingOrchestrator
from slotbook.application.use_cases.booking_session import BookingSession
from slotbook.application.use_cases.cancellation import CancellationOrchestrator
from slotbook.application.use_cases.lead_bookings import LeadBookingsLoader
from slotbook.core.config import settings
from slotbook.domain.entities.booking_context import BookingContext
from slotbook.infrastructure.bookings.http_booking_service import HttpBookingService
from slotbook.infrastructure.bookings.mock_booking_service import MockBookingService


@lru_cache
def get_booking_service() -> BookingServicePort:
    logger = logging.getLogger(__name__)
    if not settings.BOOKINGS_API_BASE_URL or settings.ENV.lower() in {"dev", "local"}:
        logger.info("Using MockBookingService", extra={"env": settings.ENV})
        return MockBookingService(default_ranges=[(settings.BUSINESS_HOURS_START, settings.BUSINESS_HOURS_END)])
    return HttpBookingService()


def build_session(context: BookingContext, service: BookingServicePort | None = None) -> BookingSession:
    service = service or get_booking_service()
    granularity = settings.SLOT_GRANULARITY_MINUTES
    reconciler = AvailabilityReconciler(service, granularity=granularity)
    bookings_loader = LeadBookingsLoader(service, granularity=granularity)
    return BookingSession(
        context=context,
        reconciler=reconciler,
        bookings_loader=bookings_loader,
        orchestrator=BookingOrchestrator(
            service,
            reconciler,
            bookings_loader,
            booking_source=settings.BOOKING_SOURCE,
            granularity=granularity,
        ),
        cancellation=CancellationOrchestrator(service, reconciler, bookings_loader),
        granularity=granularity,
    )


def get_session_factory():
    return build_session
