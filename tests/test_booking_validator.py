from slotbook.application.use_cases.booking_validator import is_bookable
from slotbook.application.utils.time_intervals import make_interval
from slotbook.domain.entities.time_interval import Interval


def test_candidate_straddling_slot_edge_is_not_bookable():
    """A candidate must fit inside one atomic slot, not across two of them."""
    atomic = [make_interval("09:00", "09:15"), make_interval("09:15", "09:30")]

    assert is_bookable(make_interval("09:10", "09:30"), atomic) is False
    assert is_bookable(make_interval("09:15", "09:30"), atomic) is True
    assert is_bookable(make_interval("09:05", "09:10"), atomic) is True


def test_slot_ending_at_midnight_accepts_candidate_ending_at_midnight():
    atomic = [Interval(1425, 0)]

    assert is_bookable(make_interval("23:50", "00:00"), atomic) is True
    assert is_bookable(Interval(1430, 0), atomic) is True


def test_rejects_missing_negative_or_empty_candidates():
    atomic = [make_interval("09:00", "09:15")]

    assert is_bookable(None, atomic) is False
    assert is_bookable(Interval(-5, 550), atomic) is False
    assert is_bookable(Interval(545, 545), atomic) is False
    assert is_bookable(Interval(550, 545), atomic) is False


def test_nothing_is_bookable_without_availability():
    assert is_bookable(make_interval("09:00", "09:15"), []) is False
