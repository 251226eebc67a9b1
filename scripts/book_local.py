#!/usr/bin/env python3
"""
Local booking harness (no HTTP backend).

Usage:
  python3 scripts/book_local.py [YYYY-MM-DD]

What it does:
- Seeds the in-memory backend with one counsellor's availability
- Loads the session, books the first free slot, then cancels it
- Prints atomic slots and bookings after each step
"""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slotbook.domain.entities.booking_context import BookingContext, Counsellor
from slotbook.infrastructure.bookings.mock_booking_service import MockBookingService
from slotbook.wiring.dependencies import build_session


def _print_state(title: str, session) -> None:
    snapshot = session.snapshot()
    print(f"\n== {title}")
    print("atomic:", " ".join(i.label() for i in snapshot.atomic_slots) or "-")
    print("selected:", snapshot.selected.label() if snapshot.selected else "-", "| can_book:", snapshot.can_book)
    for booking in snapshot.bookings:
        print(f"booking {booking.id}: {booking.date} {booking.interval.label()} [{booking.status.value}] {booking.user_name or ''}")


def main() -> None:
    day = sys.argv[1] if len(sys.argv) > 1 else date.today().isoformat()

    service = MockBookingService()
    service.set_availability("u1", day, [("09:00", "10:00"), ("14:00", "15:30")])

    context = BookingContext(
        lead_id="lead-1",
        date=day,
        user_id="u1",
        tenant_id="tenant-1",
        created_by="agent-1",
        users=(Counsellor(id="u1", name="Dana", email="dana@example.com"),),
    )
    session = build_session(context, service=service)

    session.load()
    _print_state("loaded", session)

    result = session.book(note="Intro call")
    print(f"\n{result.level.upper()}: {result.message}")
    _print_state("after booking", session)

    if result.booking_id:
        cancelled = session.cancel(result.booking_id)
        print(f"\n{cancelled.level.upper()}: {cancelled.message}")
        _print_state("after cancel", session)


if __name__ == "__main__":
    main()
