"""
Tests for the HTTP bookings adapter, using httpx.MockTransport in place of the network.
"""

from __future__ import annotations

import json

import httpx
import pytest

from slotbook.application.exceptions import EndpointUnsupportedError, TransportError
from slotbook.core.config import settings
from slotbook.domain.entities.booking import BookingRequest
from slotbook.domain.entities.time_interval import Interval
from slotbook.infrastructure.bookings.http_booking_service import HttpBookingService


def make_service(handler, api_token: str | None = "secret-token") -> HttpBookingService:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpBookingService(base_url="https://crm.example.com/", api_token=api_token, client=client)


def make_request(**overrides) -> BookingRequest:
    fields = dict(
        lead_id="lead-1",
        user_id="u1",
        date="2025-03-10",
        interval=Interval(600, 615),
        tenant_id="tenant-1",
        created_by="agent-1",
        assigned_user_id="agent-1",
        student_id="lead-1",
        booking_type="manual_followup",
        booking_source="user_ui",
        timezone=None,
    )
    fields.update(overrides)
    return BookingRequest(**fields)


def test_fetch_availability_sends_selection_and_parses_lists():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "availableSlots": [{"start": "10:00", "end": "11:00"}],
                "bookings": [{"start": "10:15", "end": "10:30"}],
            },
        )

    window = make_service(handler).fetch_availability("u1", "2025-03-10", 15, "UTC", "09:00", "18:00")

    request = seen[0]
    assert request.url.path == "/api/deals-pipeline/availability"
    assert request.url.params["userId"] == "u1"
    assert request.url.params["counsellorId"] == "u1"
    assert request.url.params["slotMinutes"] == "15"
    assert request.url.params["businessHoursEnd"] == "18:00"
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert window.ranges == [{"start": "10:00", "end": "11:00"}]
    assert window.bookings == [{"start": "10:15", "end": "10:30"}]
    assert window.source == "availability"


def test_missing_endpoint_raises_unsupported():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "Not Found"})

    with pytest.raises(EndpointUnsupportedError):
        make_service(handler).fetch_availability("u1", "2025-03-10", 15, "UTC", "09:00", "18:00")


def test_fetch_booking_availability_uses_day_bounds():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"startTime": "2025-03-10T10:00:00Z", "endTime": "2025-03-10T10:30:00Z"}])

    window = make_service(handler).fetch_booking_availability(
        "u1", "2025-03-10T09:00:00Z", "2025-03-10T18:00:59Z", 15, "UTC"
    )

    assert seen[0].url.path == "/api/deals-pipeline/bookings/availability"
    assert seen[0].url.params["dayStart"] == "2025-03-10T09:00:00Z"
    assert seen[0].url.params["dayEnd"] == "2025-03-10T18:00:59Z"
    assert window.date == "2025-03-10"
    assert window.source == "booking-availability"
    assert len(window.ranges) == 1


def test_fetch_bookings_drops_cancelled_and_falls_back_to_legacy_path():
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        if request.url.path == "/api/deals-pipeline/bookings":
            return httpx.Response(404)
        return httpx.Response(
            200,
            json={"data": [{"id": "b1", "status": "scheduled"}, {"id": "b2", "status": "canceled"}, "junk"]},
        )

    bookings = make_service(handler).fetch_bookings("lead-1", "2025-03-10")

    assert paths == ["/api/deals-pipeline/bookings", "/api/deals-pipeline/booking"]
    assert [b["id"] for b in bookings] == ["b1"]


def test_create_booking_posts_snake_case_payload():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"data": {"id": 42}})

    booking_id = make_service(handler).create_booking(make_request())

    payload = json.loads(seen[0].content)
    assert booking_id == "42"
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/deals-pipeline/bookings"
    assert payload["scheduled_at"] == "2025-03-10T10:00:00Z"
    assert payload["booking_time"] == "10:00"
    assert payload["counsellor_id"] == "u1"
    assert payload["booking_source"] == "user_ui"
    assert "timezone" not in payload


def test_create_booking_falls_back_to_legacy_payload():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/api/deals-pipeline/bookings":
            return httpx.Response(404)
        return httpx.Response(200, json={"booking": {"bookingId": "legacy-9"}})

    booking_id = make_service(handler).create_booking(make_request())

    assert booking_id == "legacy-9"
    assert json.loads(seen[1].content) == {
        "leadId": "lead-1",
        "counsellorId": "u1",
        "date": "2025-03-10",
        "startTime": "10:00",
        "endTime": "10:15",
    }


def test_create_booking_surfaces_backend_error_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"error": "Slot already booked"})

    with pytest.raises(TransportError) as exc:
        make_service(handler).create_booking(make_request())

    assert str(exc.value) == "Slot already booked"
    assert exc.value.status_code == 409


def test_create_booking_without_id_is_an_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    with pytest.raises(TransportError):
        make_service(handler).create_booking(make_request())


def test_cancel_tolerates_booking_already_gone():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        return httpx.Response(404)

    make_service(handler).cancel_booking("b1")

    assert seen == [
        ("POST", "/api/deals-pipeline/bookings/b1/cancel"),
        ("DELETE", "/api/deals-pipeline/booking/b1"),
    ]


def test_add_lead_note_posts_content():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    make_service(handler).add_lead_note("lead-1", "Intro call")

    assert seen[0].url.path == "/api/deals-pipeline/leads/lead-1/notes"
    assert json.loads(seen[0].content) == {"content": "Intro call"}


def test_network_failure_becomes_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as exc:
        make_service(handler).fetch_bookings("lead-1")

    assert exc.value.status_code is None


def test_base_url_is_required(monkeypatch):
    monkeypatch.setattr(settings, "BOOKINGS_API_BASE_URL", None)

    with pytest.raises(ValueError):
        HttpBookingService(base_url=None, client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200))))


def test_fetch_bookings_without_any_bookings_endpoint_is_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    assert make_service(handler).fetch_bookings("lead-1", "2025-03-10") == []


def test_check_availability_reports_backend_verdict():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"available": False, "message": "Counsellor is busy"})

    check = make_service(handler).check_availability("u1", "2025-03-10", "10:00", "10:15")

    assert check.available is False
    assert check.message == "Counsellor is busy"
    assert seen[0].url.path == "/api/deals-pipeline/availability"
    assert dict(seen[0].url.params) == {
        "counsellorId": "u1",
        "date": "2025-03-10",
        "startTime": "10:00",
        "endTime": "10:15",
    }


def test_check_availability_defaults_to_available():
    def missing(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    def silent(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"slots": []})

    assert make_service(missing).check_availability("u1", "2025-03-10", "10:00", "10:15").available is True
    assert make_service(silent).check_availability("u1", "2025-03-10", "10:00", "10:15").available is True


def test_check_availability_server_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "boom"})

    with pytest.raises(TransportError):
        make_service(handler).check_availability("u1", "2025-03-10", "10:00", "10:15")
