from fastapi import APIRouter, Depends, HTTPException, Query

from slotbook.api.v1.schemas import (
    AvailabilityResponseSchema,
    BookingContextSchema,
    BookingSchema,
    BookRequestSchema,
    BookResponseSchema,
    CancelRequestSchema,
    CancelResponseSchema,
    IntervalSchema,
    SlotSchema,
    ValidateRequestSchema,
    ValidateResponseSchema,
)
from slotbook.application.exceptions import FormatError
from slotbook.application.use_cases.slot_generator import generate_slots
from slotbook.core.config import settings
from slotbook.domain.entities.booking_context import BookingContext, Counsellor
from slotbook.wiring.dependencies import get_session_factory

router = APIRouter()

_ACTION_STATUS = {"invalid": 422, "conflict": 409, "failed": 502}


def _to_context(schema: BookingContextSchema) -> BookingContext:
    return BookingContext(
        lead_id=schema.lead_id,
        date=schema.date,
        user_id=schema.user_id,
        tenant_id=schema.tenant_id,
        student_id=schema.student_id,
        assigned_user_id=schema.assigned_user_id,
        created_by=schema.created_by,
        booking_type=schema.booking_type or settings.DEFAULT_BOOKING_TYPE,
        timezone=schema.timezone or settings.BUSINESS_TIMEZONE,
        business_hours_start=schema.business_hours_start or settings.BUSINESS_HOURS_START,
        business_hours_end=schema.business_hours_end or settings.BUSINESS_HOURS_END,
        users=tuple(Counsellor(id=u.id, name=u.name, email=u.email) for u in schema.users),
    )


@router.get("/slots", response_model=list[SlotSchema])
def list_slots(
    date: str,
    start: str = Query(default=settings.BUSINESS_HOURS_START),
    end: str = Query(default=settings.BUSINESS_HOURS_END),
    granularity: int = Query(default=settings.SLOT_GRANULARITY_MINUTES, gt=0),
):
    try:
        slots = generate_slots(date, start, end, granularity)
    except FormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [SlotSchema.from_slot(s) for s in slots]


@router.get("/availability", response_model=AvailabilityResponseSchema)
def get_availability(
    lead_id: str,
    user_id: str,
    date: str = Query(pattern=r"^\d{4}-\d{2}-\d{2}$"),
    timezone: str | None = None,
    business_hours_start: str | None = None,
    business_hours_end: str | None = None,
    session_factory=Depends(get_session_factory),
):
    context_schema = BookingContextSchema(
        lead_id=lead_id,
        user_id=user_id,
        date=date,
        timezone=timezone,
        business_hours_start=business_hours_start,
        business_hours_end=business_hours_end,
    )
    session = session_factory(_to_context(context_schema))
    try:
        result = session.load()
    except FormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result.error and not result.ok:
        raise HTTPException(status_code=502, detail=result.error)

    snapshot = session.snapshot()
    return AvailabilityResponseSchema(
        ok=result.ok,
        source=result.source,
        error=result.error,
        atomic_slots=[IntervalSchema.from_interval(i) for i in snapshot.atomic_slots],
        booked_intervals=[IntervalSchema.from_interval(i) for i in snapshot.booked_intervals],
        selected=IntervalSchema.from_interval(snapshot.selected) if snapshot.selected else None,
        can_book=snapshot.can_book,
        time_slots=[SlotSchema.from_slot(s) for s in snapshot.time_slots],
        bookings=[BookingSchema.from_booking(b) for b in snapshot.bookings],
    )


@router.post("/bookings/validate", response_model=ValidateResponseSchema)
def validate_booking(req: ValidateRequestSchema, session_factory=Depends(get_session_factory)):
    session = session_factory(_to_context(req.context))
    try:
        session.load()
        bookable = session.select_time(req.start_time, req.end_time)
    except FormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ValidateResponseSchema(bookable=bookable)


@router.post("/bookings", response_model=BookResponseSchema)
def create_booking(req: BookRequestSchema, session_factory=Depends(get_session_factory)):
    session = session_factory(_to_context(req.context))
    try:
        session.load()
        if req.start_time and req.end_time:
            session.select_time(req.start_time, req.end_time)
    except FormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = session.book(note=req.note)
    if result.action in _ACTION_STATUS:
        raise HTTPException(status_code=_ACTION_STATUS[result.action], detail=result.message)

    return BookResponseSchema(
        action=result.action,
        message=result.message,
        level=result.level,
        booking_id=result.booking_id,
        note_saved=result.note_saved,
        atomic_slots=[IntervalSchema.from_interval(i) for i in session.state.atomic_slots],
    )


@router.post("/bookings/{booking_id}/cancel", response_model=CancelResponseSchema)
def cancel_booking(booking_id: str, req: CancelRequestSchema, session_factory=Depends(get_session_factory)):
    session = session_factory(_to_context(req.context))
    result = session.cancel(booking_id)
    if result.action == "failed":
        raise HTTPException(status_code=502, detail=result.message)
    return CancelResponseSchema(action=result.action, message=result.message, booking_id=booking_id)
