from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..booking_validation import validate_booking, validate_rating, validate_registration
from ..models import Booking
from .base import BaseClient, expect_list, expect_object

BOOKINGS_PATH = "/bookings"


@dataclass
class PassengerClient(BaseClient):
    module: str = "passenger"

    async def register(
        self,
        full_name: str,
        email: str,
        phone: str,
        password: str,
        confirm_password: str,
    ) -> dict[str, Any]:
        """Create a passenger account; the backend holds it until an admin approves it."""
        payload = validate_registration(full_name, email, phone, password, confirm_password)
        data = await self.http.request(
            "POST",
            "/users/register",
            json_body=payload,
            module=self.module,
            operation="register",
            notify_auth_errors=False,
        )
        return expect_object(data, "register")

    async def create_booking(
        self,
        booking_type: str,
        travel_at: datetime,
        route: str,
        amount_paid: Any,
        **details: Any,
    ) -> dict[str, Any]:
        payload = validate_booking(booking_type, travel_at, route, amount_paid, **details)
        data = await self._request("POST", f"{BOOKINGS_PATH}/create", json_body=payload, operation="create_booking")
        return expect_object(data, "create booking")

    async def my_bookings(self) -> list[Booking]:
        payload = await self._request("GET", f"{BOOKINGS_PATH}/mybookings", operation="my_bookings")
        return [Booking.model_validate(row) for row in expect_list(payload, "my bookings", "bookings")]

    async def mark_arrived(self, booking_id: str) -> dict[str, Any]:
        data = await self._request("PUT", f"{BOOKINGS_PATH}/{booking_id}/arrived", json_body={}, operation="mark_arrived")
        return expect_object(data, "mark arrived")

    async def rate_trip(self, booking_id: str, rating: Any) -> dict[str, Any]:
        body = {"bookingId": booking_id, "rating": validate_rating(rating)}
        data = await self._request("POST", f"{BOOKINGS_PATH}/rate", json_body=body, operation="rate_trip")
        return expect_object(data, "rate trip")
