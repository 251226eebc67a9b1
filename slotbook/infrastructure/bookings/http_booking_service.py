from __future__ import annotations

import logging
from typing import Any

import httpx

from slotbook.application.exceptions import EndpointUnsupportedError, TransportError
from slotbook.application.ports.booking_service import BookingServicePort
from slotbook.application.utils.record_normalizer import extract_availability_lists, extract_booking_list
from slotbook.core.config import settings
from slotbook.domain.entities.availability import AvailabilityCheck, AvailabilityWindow
from slotbook.domain.entities.booking import BookingRequest, BookingStatus

BOOKINGS_PATH = "/api/deals-pipeline/bookings"
LEGACY_BOOKINGS_PATH = "/api/deals-pipeline/booking"
AVAILABILITY_PATH = "/api/deals-pipeline/availability"
BOOKING_AVAILABILITY_PATH = f"{BOOKINGS_PATH}/availability"
LEADS_PATH = "/api/deals-pipeline/leads"


class HttpBookingService(BookingServicePort):
    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.BOOKINGS_API_BASE_URL or "").rstrip("/")
        self._api_token = api_token or settings.BOOKINGS_API_TOKEN
        self._client = client or httpx.Client(timeout=timeout or settings.HTTP_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._base_url:
            raise ValueError("BOOKINGS_API_BASE_URL is required for the HTTP booking service")

    def fetch_bookings(self, lead_id: str, date: str | None = None) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"leadId": lead_id, "lead_id": lead_id}
        if date:
            params["date"] = date

        try:
            data = self._request("GET", BOOKINGS_PATH, params=params)
        except EndpointUnsupportedError:
            try:
                data = self._request("GET", LEGACY_BOOKINGS_PATH, params=params)
            except EndpointUnsupportedError:
                self._logger.info("No bookings endpoint on backend", extra={"lead_id": lead_id})
                return []

        bookings = [b for b in extract_booking_list(data) if isinstance(b, dict)]
        return [b for b in bookings if BookingStatus.from_raw(b.get("status")) is not BookingStatus.cancelled]

    def fetch_availability(
        self,
        user_id: str,
        date: str,
        slot_minutes: int,
        timezone: str,
        business_hours_start: str,
        business_hours_end: str,
    ) -> AvailabilityWindow:
        params = {
            "userId": user_id,
            "counsellorId": user_id,
            "date": date,
            "slotMinutes": slot_minutes,
            "timezone": timezone,
            "businessHoursStart": business_hours_start,
            "businessHoursEnd": business_hours_end,
        }
        data = self._request("GET", AVAILABILITY_PATH, params=params)
        ranges, bookings = extract_availability_lists(data)
        return AvailabilityWindow(user_id=user_id, date=date, ranges=ranges, bookings=bookings, source="availability")

    def fetch_booking_availability(
        self,
        user_id: str,
        day_start: str,
        day_end: str,
        slot_minutes: int,
        timezone: str,
    ) -> AvailabilityWindow:
        params = {
            "userId": user_id,
            "dayStart": day_start,
            "dayEnd": day_end,
            "slotMinutes": slot_minutes,
            "timezone": timezone,
        }
        data = self._request("GET", BOOKING_AVAILABILITY_PATH, params=params)
        ranges, bookings = extract_availability_lists(data)
        return AvailabilityWindow(
            user_id=user_id,
            date=day_start[:10],
            ranges=ranges,
            bookings=bookings,
            source="booking-availability",
        )

    def check_availability(self, user_id: str, date: str, start_time: str, end_time: str) -> AvailabilityCheck:
        params = {"counsellorId": user_id, "date": date, "startTime": start_time, "endTime": end_time}
        try:
            data = self._request("GET", AVAILABILITY_PATH, params=params)
        except EndpointUnsupportedError:
            return AvailabilityCheck(available=True, message="Availability check not available")

        if not isinstance(data, dict):
            return AvailabilityCheck(available=True)
        available = data.get("available")
        message = data.get("message")
        return AvailabilityCheck(
            available=True if available is None else bool(available),
            message=str(message) if message else None,
        )

    def create_booking(self, request: BookingRequest) -> str:
        payload: dict[str, Any] = {
            "tenant_id": request.tenant_id,
            "student_id": request.student_id,
            "lead_id": request.lead_id,
            "counsellor_id": request.user_id,
            "assigned_user_id": request.assigned_user_id,
            "booking_type": request.booking_type,
            "booking_source": request.booking_source,
            "booking_time": request.interval.start_time,
            "booking_date": request.date,
            "scheduled_at": request.scheduled_at,
            "created_by": request.created_by,
            "timezone": request.timezone,
        }
        payload = {k: v for k, v in payload.items() if v is not None}

        try:
            data = self._request("POST", BOOKINGS_PATH, json=payload)
        except EndpointUnsupportedError:
            legacy_payload = {
                "leadId": request.lead_id,
                "counsellorId": request.user_id,
                "date": request.date,
                "startTime": request.interval.start_time,
                "endTime": request.interval.end_time,
            }
            data = self._request("POST", LEGACY_BOOKINGS_PATH, json=legacy_payload)

        booking_id = _booking_id(data)
        if not booking_id:
            raise TransportError("No booking ID returned from bookings API")

        self._logger.info(
            "Booking created",
            extra={"booking_id": booking_id, "lead_id": request.lead_id, "user_id": request.user_id},
        )
        return booking_id

    def cancel_booking(self, booking_id: str) -> None:
        try:
            self._request("POST", f"{BOOKINGS_PATH}/{booking_id}/cancel")
        except EndpointUnsupportedError:
            try:
                self._request("DELETE", f"{LEGACY_BOOKINGS_PATH}/{booking_id}")
            except EndpointUnsupportedError:
                self._logger.info("Booking already gone", extra={"booking_id": booking_id})
                return

        self._logger.info("Booking cancelled", extra={"booking_id": booking_id})

    def add_lead_note(self, lead_id: str, content: str) -> None:
        self._request("POST", f"{LEADS_PATH}/{lead_id}/notes", json={"content": content})

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self._base_url}{path}"
        headers = {"Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"

        try:
            resp = self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            self._logger.error("Bookings API unreachable", extra={"path": path, "error": str(e)})
            raise TransportError(f"Bookings API unreachable: {e}") from e

        if resp.status_code == 404:
            raise EndpointUnsupportedError(_error_message(resp, "Not found"), status_code=404)

        if resp.status_code >= 400:
            message = _error_message(resp, "Request to bookings API failed")
            self._logger.error(
                "Bookings API request failed",
                extra={"path": path, "status": resp.status_code, "error": message},
            )
            raise TransportError(message, status_code=resp.status_code)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return None


def _error_message(resp: httpx.Response, default: str) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or default
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and value.get("message"):
                return str(value["message"])
    return default


def _booking_id(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    for candidate in (data.get("data"), data.get("booking"), data):
        if isinstance(candidate, dict):
            value = candidate.get("id") or candidate.get("bookingId")
            if value:
                return str(value)
    return None
