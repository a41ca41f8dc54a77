from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..models import Booking
from .base import BaseClient, expect_list, expect_object

BASE_PATH = "/finance"


@dataclass
class FinanceClient(BaseClient):
    module: str = "finance"

    async def bookings(self) -> list[Booking]:
        payload = await self._request("GET", f"{BASE_PATH}/bookings", operation="bookings")
        return [Booking.model_validate(row) for row in expect_list(payload, "bookings", "bookings")]

    async def summary(self) -> dict[str, Any]:
        payload = await self._request("GET", f"{BASE_PATH}/summary", operation="summary")
        return expect_object(payload, "finance summary")

    async def orders(self) -> list[dict[str, Any]]:
        payload = await self._request("GET", f"{BASE_PATH}/orders", operation="orders")
        return expect_list(payload, "orders", "orders")

    async def approve_payment(self, booking_id: str) -> dict[str, Any]:
        return await self._post("approve-payment", {"bookingId": booking_id})

    async def reject_payment(self, booking_id: str) -> dict[str, Any]:
        return await self._post("reject-payment", {"bookingId": booking_id})

    async def approve_booking(self, booking_id: str) -> dict[str, Any]:
        return await self._post("approve-booking", {"bookingId": booking_id})

    async def place_on_ferry(self, booking_id: str, ferry_name: str) -> dict[str, Any]:
        return await self._post("place-on-ferry", {"bookingId": booking_id, "ferryName": ferry_name})

    async def approve_order_payment(self, order_id: str) -> dict[str, Any]:
        return await self._post("approve-order-payment", {"orderId": order_id})

    async def reject_order_payment(self, order_id: str) -> dict[str, Any]:
        return await self._post("reject-order-payment", {"orderId": order_id})

    async def _post(self, action: str, body: dict[str, Any]) -> dict[str, Any]:
        payload = await self._request(
            "POST", f"{BASE_PATH}/{action}", json_body=body, operation=action.replace("-", "_")
        )
        return expect_object(payload, action)
