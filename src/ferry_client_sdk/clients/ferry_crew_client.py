from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import ProtocolError
from ..models import Booking, Ferry
from .base import BaseClient, expect_list, expect_object

BASE_PATH = "/api/ferrycrew"


@dataclass
class FerryCrewClient(BaseClient):
    module: str = "ferry_crew"

    async def paid_bookings(self) -> list[Booking]:
        payload = await self._request("GET", f"{BASE_PATH}/bookings/paid", operation="paid_bookings")
        return [Booking.model_validate(row) for row in expect_list(payload, "paid bookings", "bookings")]

    async def approve_booking(self, booking_id: str) -> Booking:
        payload = await self._request(
            "PUT", f"{BASE_PATH}/bookings/{booking_id}/approve", json_body={}, operation="approve_booking"
        )
        return _booking(payload, "approve booking")

    async def assign_ferry(self, booking_id: str, ferry_id: str) -> Booking:
        payload = await self._request(
            "PUT",
            f"{BASE_PATH}/bookings/{booking_id}/assign",
            json_body={"ferryId": ferry_id},
            operation="assign_ferry",
        )
        return _booking(payload, "assign ferry")

    async def ferries(self) -> list[Ferry]:
        payload = await self._request("GET", f"{BASE_PATH}/ferries", operation="ferries")
        return [Ferry.model_validate(row) for row in expect_list(payload, "ferries", "ferries")]


def _booking(payload: object, operation: str) -> Booking:
    booking = expect_object(payload, operation).get("booking")
    if not isinstance(booking, dict):
        raise ProtocolError(
            code="UNEXPECTED_SHAPE",
            message=f"Expected {operation} response to carry a booking",
            raw_payload=payload,
        )
    return Booking.model_validate(booking)
