from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AvailabilityWindow:
    """Raw availability for one (user, date) as returned by a single backend call."""

    user_id: str
    date: str
    ranges: list[dict[str, Any]] = field(default_factory=list)
    bookings: list[dict[str, Any]] = field(default_factory=list)
    source: str = "availability"  # "availability" or "booking-availability"


@dataclass(frozen=True)
class AvailabilityCheck:
    """Backend verdict on one candidate interval just before submit."""

    available: bool = True
    message: str | None = None
