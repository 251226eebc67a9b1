from __future__ import annotations

import logging
from dataclasses import dataclass

from slotbook.application.exceptions import TransportError
from slotbook.application.ports.booking_service import BookingServicePort
from slotbook.application.utils.record_normalizer import normalize_intervals
from slotbook.application.utils.time_intervals import expand, sort_intervals
from slotbook.domain.entities.availability import AvailabilityWindow
from slotbook.domain.entities.booking_context import BookingContext
from slotbook.domain.entities.booking_state import BookingViewState
from slotbook.domain.entities.time_interval import Interval

FETCH_KIND = "availability"


@dataclass(frozen=True)
class AvailabilityResult:
    ok: bool
    source: str | None = None
    atomic_slots: tuple[Interval, ...] = ()
    booked_intervals: tuple[Interval, ...] = ()
    error: str | None = None
    stale: bool = False


class AvailabilityReconciler:
    def __init__(self, service: BookingServicePort, granularity: int = 15) -> None:
        self._service = service
        self._granularity = granularity
        self._logger = logging.getLogger(__name__)

    def refresh(self, context: BookingContext, state: BookingViewState) -> AvailabilityResult:
        """
        Rebuild atomic slots and the user's booked intervals for the active (user, date).
        Tries the primary endpoint, then the fallback; clears state if both fail.
        """
        if not context.user_id or not context.date:
            return AvailabilityResult(ok=False, error="No user or date selected")

        token = state.begin_fetch(FETCH_KIND)
        try:
            window = self._fetch(context)
        except TransportError as e:
            if not state.is_current(FETCH_KIND, token):
                return AvailabilityResult(ok=False, error=str(e), stale=True)
            self._logger.error(
                "Error fetching availability",
                extra={"user_id": context.user_id, "date": context.date, "error": str(e)},
            )
            state.clear_availability()
            state.last_error = str(e)
            return AvailabilityResult(ok=False, error=str(e))

        if not state.is_current(FETCH_KIND, token):
            self._logger.info(
                "Discarding stale availability response",
                extra={"user_id": context.user_id, "date": context.date, "generation": token},
            )
            return AvailabilityResult(ok=True, source=window.source, stale=True)

        atomic = sort_intervals(expand(normalize_intervals(window.ranges, context.date), self._granularity))
        booked = normalize_intervals(window.bookings, context.date)

        state.atomic_slots = atomic
        state.booked_intervals = booked
        if state.selected not in atomic:
            state.selected = atomic[0] if atomic else None

        self._logger.info(
            "Availability refreshed",
            extra={
                "user_id": context.user_id,
                "date": context.date,
                "source": window.source,
                "slot_count": len(atomic),
            },
        )
        return AvailabilityResult(
            ok=True,
            source=window.source,
            atomic_slots=tuple(atomic),
            booked_intervals=tuple(booked),
        )

    def _fetch(self, context: BookingContext) -> AvailabilityWindow:
        try:
            return self._service.fetch_availability(
                user_id=context.user_id,
                date=context.date,
                slot_minutes=self._granularity,
                timezone=context.timezone,
                business_hours_start=context.business_hours_start,
                business_hours_end=context.business_hours_end,
            )
        except TransportError as e:
            self._logger.warning(
                "Primary availability endpoint failed, falling back",
                extra={"user_id": context.user_id, "date": context.date, "error": str(e)},
            )

        return self._service.fetch_booking_availability(
            user_id=context.user_id,
            day_start=f"{context.date}T{context.business_hours_start}:00Z",
            day_end=f"{context.date}T{context.business_hours_end}:59Z",
            slot_minutes=self._granularity,
            timezone=context.timezone,
        )
