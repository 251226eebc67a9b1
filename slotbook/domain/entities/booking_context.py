from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Counsellor:
    id: str
    name: str = ""
    email: str = ""


@dataclass(frozen=True)
class BookingContext:
    """The active (lead, user, date) a booking session works on."""

    lead_id: str
    date: str  # YYYY-MM-DD
    user_id: str | None = None  # counsellor/agent being booked
    tenant_id: str | None = None
    student_id: str | None = None  # defaults to lead_id when absent
    assigned_user_id: str | None = None  # defaults to created_by when absent
    created_by: str | None = None
    booking_type: str = "manual_followup"
    timezone: str = "UTC"
    business_hours_start: str = "09:00"
    business_hours_end: str = "18:00"
    users: tuple[Counsellor, ...] = ()

    def with_selection(
        self,
        user_id: str | None = None,
        date: str | None = None,
    ) -> "BookingContext":
        return replace(
            self,
            user_id=user_id if user_id is not None else self.user_id,
            date=date if date is not None else self.date,
        )

    def with_business_hours(self, start: str, end: str) -> "BookingContext":
        return replace(self, business_hours_start=start, business_hours_end=end)

    def find_user(self, user_id: object) -> Counsellor | None:
        if user_id is None:
            return None
        for user in self.users:
            if str(user.id) == str(user_id):
                return user
        return None
