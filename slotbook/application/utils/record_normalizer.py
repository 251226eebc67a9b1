"""
Normalization of loosely-typed backend records into canonical intervals and bookings.

Backends disagree on field names, so every field is read through an ordered
tuple of extractors; the first one yielding a non-empty value wins. Records that
cannot be normalized are dropped, never raised.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

from slotbook.application.exceptions import FormatError
from slotbook.application.utils.time_intervals import make_interval
from slotbook.domain.entities.booking import Booking, BookingStatus
from slotbook.domain.entities.booking_context import Counsellor
from slotbook.domain.entities.slot import slot_id
from slotbook.domain.entities.time_interval import Interval

Extractor = Callable[[Mapping[str, Any]], Any]

logger = logging.getLogger(__name__)


def field(name: str) -> Extractor:
    return lambda record: record.get(name)


def fields(*names: str) -> tuple[Extractor, ...]:
    return tuple(field(name) for name in names)


RANGE_START: tuple[Extractor, ...] = fields("start", "startTime", "start_time", "scheduled_at")
RANGE_END: tuple[Extractor, ...] = fields("end", "endTime", "end_time", "ends_at")

BOOKING_START: tuple[Extractor, ...] = fields("scheduled_at", "start_time", "startTime", "booking_time")
BOOKING_END: tuple[Extractor, ...] = fields("buffer_until", "end_time", "endTime")
BOOKING_DATE: tuple[Extractor, ...] = fields("booking_date", "date")
BOOKING_USER: tuple[Extractor, ...] = fields(
    "counsellor_id", "counsellorId", "user_id", "userId", "assigned_user_id", "created_by"
)
BOOKING_USER_NAME: tuple[Extractor, ...] = fields("counsellor_name", "counsellorName", "user_name", "userName")
BOOKING_USER_EMAIL: tuple[Extractor, ...] = fields(
    "counsellor_email", "counsellorEmail", "user_email", "userEmail"
)
BOOKING_TYPE: tuple[Extractor, ...] = fields("booking_type", "bookingType", "type")
BOOKING_RETRY_COUNT: tuple[Extractor, ...] = fields("retry_count", "retryCount")

AVAILABLE_LIST_KEYS = ("availableSlots", "available_slots", "slots", "timeSlots")
BOOKED_LIST_KEYS = ("bookings", "bookedSlots", "booked_slots", "previousBookings", "previous_bookings")


def first_value(record: Mapping[str, Any], extractors: Iterable[Extractor]) -> Any:
    for extract in extractors:
        value = extract(record)
        if value is not None and value != "":
            return value
    return None


def _optional_str(value: Any) -> str | None:
    return None if value is None or value == "" else str(value)


def normalize_interval(
    record: Any,
    start_extractors: Iterable[Extractor] = RANGE_START,
    end_extractors: Iterable[Extractor] = RANGE_END,
) -> Interval | None:
    if not isinstance(record, Mapping):
        return None
    start_raw = first_value(record, start_extractors)
    end_raw = first_value(record, end_extractors)
    if start_raw is None or end_raw is None:
        return None
    try:
        interval = make_interval(str(start_raw), str(end_raw))
    except FormatError:
        return None
    if not interval.is_proper:
        return None
    return interval


def _iso_date(value: Any) -> str | None:
    text = str(value)
    return text[:10] if "T" in text else None


def on_date(record: Any, date: str | None, start_extractors: Iterable[Extractor] = RANGE_START) -> bool:
    """False only when the record's start is an ISO timestamp for a different day."""
    if date is None or not isinstance(record, Mapping):
        return True
    start_raw = first_value(record, start_extractors)
    if start_raw is None:
        return True
    record_date = _iso_date(start_raw)
    return record_date is None or record_date == date


def normalize_intervals(records: Iterable[Any], date: str | None = None) -> list[Interval]:
    intervals: list[Interval] = []
    dropped = 0
    for record in records or []:
        interval = normalize_interval(record) if on_date(record, date) else None
        if interval is None:
            dropped += 1
            continue
        intervals.append(interval)
    if dropped:
        logger.debug("Dropped unparseable ranges", extra={"dropped": dropped})
    return intervals


def _list_under(payload: Any, keys: Iterable[str]) -> list[Any]:
    if not isinstance(payload, Mapping):
        return []
    for key in keys:
        value = payload.get(key)
        if isinstance(value, list):
            return value
    return []


def extract_availability_lists(payload: Any) -> tuple[list[Any], list[Any]]:
    """Return (available ranges, existing bookings) from any known response shape."""
    if isinstance(payload, list):
        return payload, []
    return _list_under(payload, AVAILABLE_LIST_KEYS), _list_under(payload, BOOKED_LIST_KEYS)


def extract_booking_list(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    return _list_under(payload, ("data", "bookings"))


def _retry_count(value: Any) -> int:
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 0
    return max(count, 0)


def normalize_booking(
    record: Any,
    find_user: Callable[[Any], Counsellor | None] | None = None,
) -> Booking | None:
    if not isinstance(record, Mapping):
        return None

    start_raw = first_value(record, BOOKING_START)
    interval = normalize_interval(record, BOOKING_START, BOOKING_END)
    if start_raw is None or interval is None:
        return None

    start_text = str(start_raw)
    if "T" in start_text:
        date = start_text[:10]
    else:
        date = _optional_str(first_value(record, BOOKING_DATE)) or ""
    if not date:
        return None

    user_id = _optional_str(first_value(record, BOOKING_USER))
    user = find_user(user_id) if find_user else None

    return Booking(
        id=str(record.get("id") or record.get("booking_id") or slot_id(date, interval)),
        date=date,
        interval=interval,
        status=BookingStatus.from_raw(record.get("status")),
        booking_type=str(first_value(record, BOOKING_TYPE) or ""),
        booking_source=str(record.get("booking_source") or record.get("bookingSource") or ""),
        retry_count=_retry_count(first_value(record, BOOKING_RETRY_COUNT)),
        user_id=user_id,
        user_name=(user.name if user else None) or _optional_str(first_value(record, BOOKING_USER_NAME)),
        user_email=(user.email if user else None) or _optional_str(first_value(record, BOOKING_USER_EMAIL)),
        tenant_id=_optional_str(record.get("tenant_id") or record.get("tenantId")),
        student_id=_optional_str(record.get("student_id") or record.get("studentId")),
        lead_id=_optional_str(record.get("lead_id") or record.get("leadId")),
        created_by=_optional_str(record.get("created_by") or record.get("createdBy")),
        timezone=_optional_str(record.get("timezone")),
    )
