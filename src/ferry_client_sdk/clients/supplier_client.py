from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..booking_validation import validate_supply_amount
from ..exceptions import ValidationError
from ..models import SupplyOrder
from .base import BaseClient, expect_list, expect_object

BASE_PATH = "/suppliers"


@dataclass
class SupplierClient(BaseClient):
    module: str = "supplier"

    async def orders(self) -> list[SupplyOrder]:
        payload = await self._request("GET", f"{BASE_PATH}/orders", operation="orders")
        return [SupplyOrder.model_validate(row) for row in expect_list(payload, "supply orders", "orders")]

    async def accept_order(self, order_id: str) -> dict[str, Any]:
        return await self._put(f"orders/{order_id}/accept", "accept_order")

    async def reject_order(self, order_id: str) -> dict[str, Any]:
        return await self._put(f"orders/{order_id}/reject", "reject_order")

    async def supply(self, order_id: str, amount: Any) -> dict[str, Any]:
        return await self._put(f"supply/{order_id}", "supply", {"amount": validate_supply_amount(amount)})

    async def mark_delivered(self, order_id: str) -> dict[str, Any]:
        return await self._put(f"mark-delivered/{order_id}", "mark_delivered")

    async def confirm_payment(self, order_id: str) -> dict[str, Any]:
        return await self._put(f"confirm-payment/{order_id}", "confirm_payment")

    async def payments(self, supplier_id: str | None = None) -> list[dict[str, Any]]:
        """Payments for ``supplier_id``, by default the logged-in supplier."""
        if supplier_id is None:
            session = self.session_store.get()
            supplier_id = session.user_id if session else None
        if not supplier_id:
            raise ValidationError.single("supplier_id", "No supplier found. Please login again.")
        payload = await self._request("GET", f"{BASE_PATH}/payments/{supplier_id}", operation="payments")
        return expect_list(payload, "supplier payments", "payments")

    async def _put(self, path: str, operation: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        data = await self._request("PUT", f"{BASE_PATH}/{path}", json_body=body or {}, operation=operation)
        return expect_object(data, operation)
