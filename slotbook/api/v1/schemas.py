from pydantic import BaseModel, Field

from slotbook.domain.entities.booking import Booking
from slotbook.domain.entities.slot import Slot
from slotbook.domain.entities.time_interval import Interval


class CounsellorSchema(BaseModel):
    id: str
    name: str = ""
    email: str = ""


class BookingContextSchema(BaseModel):
    lead_id: str
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    user_id: str | None = None
    tenant_id: str | None = None
    student_id: str | None = None
    assigned_user_id: str | None = None
    created_by: str | None = None
    booking_type: str | None = None
    timezone: str | None = None
    business_hours_start: str | None = None
    business_hours_end: str | None = None
    users: list[CounsellorSchema] = Field(default_factory=list)


class IntervalSchema(BaseModel):
    start_time: str
    end_time: str

    @classmethod
    def from_interval(cls, interval: Interval) -> "IntervalSchema":
        return cls(start_time=interval.start_time, end_time=interval.end_time)


class SlotSchema(BaseModel):
    id: str
    date: str
    start_time: str
    end_time: str
    is_booked: bool = False
    booking_id: str | None = None
    status: str | None = None
    booking_type: str | None = None
    retry_count: int = 0
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None

    @classmethod
    def from_slot(cls, slot: Slot) -> "SlotSchema":
        return cls(
            id=slot.id,
            date=slot.date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            is_booked=slot.is_booked,
            booking_id=slot.booking_id,
            status=slot.status,
            booking_type=slot.booking_type,
            retry_count=slot.retry_count,
            user_id=slot.user_id,
            user_name=slot.user_name,
            user_email=slot.user_email,
        )


class BookingSchema(BaseModel):
    id: str
    date: str
    start_time: str
    end_time: str
    status: str
    booking_type: str = ""
    retry_count: int = 0
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingSchema":
        return cls(
            id=booking.id,
            date=booking.date,
            start_time=booking.interval.start_time,
            end_time=booking.interval.end_time,
            status=booking.status.value,
            booking_type=booking.booking_type,
            retry_count=booking.retry_count,
            user_id=booking.user_id,
            user_name=booking.user_name,
            user_email=booking.user_email,
        )


class AvailabilityResponseSchema(BaseModel):
    ok: bool
    source: str | None = None
    error: str | None = None
    atomic_slots: list[IntervalSchema] = Field(default_factory=list)
    booked_intervals: list[IntervalSchema] = Field(default_factory=list)
    selected: IntervalSchema | None = None
    can_book: bool = False
    time_slots: list[SlotSchema] = Field(default_factory=list)
    bookings: list[BookingSchema] = Field(default_factory=list)


class ValidateRequestSchema(BaseModel):
    context: BookingContextSchema
    start_time: str
    end_time: str


class ValidateResponseSchema(BaseModel):
    bookable: bool


class BookRequestSchema(BaseModel):
    context: BookingContextSchema
    start_time: str | None = None
    end_time: str | None = None
    note: str | None = None


class BookResponseSchema(BaseModel):
    action: str
    message: str
    level: str
    booking_id: str | None = None
    note_saved: bool | None = None
    atomic_slots: list[IntervalSchema] = Field(default_factory=list)


class CancelRequestSchema(BaseModel):
    context: BookingContextSchema


class CancelResponseSchema(BaseModel):
    action: str
    message: str
    booking_id: str
