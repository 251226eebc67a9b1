from __future__ import annotations

import pytest

from slotbook.application.exceptions import FormatError
from slotbook.domain.entities.time_interval import Interval


def test_load_builds_grid_bookings_and_availability(session, service, day):
    result = session.load()
    snapshot = session.snapshot()

    assert result.ok is True
    assert service.calls == ["bookings", "availability"]
    assert len(snapshot.time_slots) == 36
    assert snapshot.time_slots[0].id == f"{day}-09:00"
    assert len(snapshot.atomic_slots) == 4
    assert snapshot.selected == Interval(600, 615)
    assert snapshot.can_book is True


def test_select_time_validates_each_change(session):
    session.load()

    assert session.select_time("10:30", "10:45") is True
    assert session.select_time("10:30", "10:50") is False
    assert session.select_time("10:35", "10:40") is True
    assert session.state.selected == Interval(635, 640)


def test_select_time_rejects_malformed_input(session):
    session.load()
    with pytest.raises(FormatError):
        session.select_time("10:3x", "10:45")


def test_switching_user_reloads_for_that_user(session, service, day):
    service.set_availability("u2", day, [("14:00", "14:30")])
    session.load()

    session.select_user("u2")

    assert session.context.user_id == "u2"
    assert [i.label() for i in session.state.atomic_slots] == ["14:00-14:15", "14:15-14:30"]
    assert session.state.selected == Interval(840, 855)


def test_switching_date_regenerates_grid(session):
    session.load()

    session.select_date("2025-03-11")

    assert session.context.date == "2025-03-11"
    assert session.state.time_slots[0].id == "2025-03-11-09:00"
    assert session.state.atomic_slots == []
    assert session.can_book() is False


def test_business_hours_change_resizes_grid(session):
    session.load()

    session.set_business_hours("10:00", "12:00")

    assert len(session.state.time_slots) == 8
    assert session.context.business_hours_start == "10:00"


def test_invalid_business_hours_keep_previous_context(session):
    session.load()

    with pytest.raises(FormatError):
        session.set_business_hours("25:00", "12:00")

    assert session.context.business_hours_start == "09:00"
