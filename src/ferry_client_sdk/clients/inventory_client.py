from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..exceptions import ValidationError
from ..inventory import filter_rows, merge_and_classify
from ..inventory_validation import validate_item_update, validate_new_item, validate_order
from ..models import Delivery, InventoryMergedRow, Supplier
from .base import BaseClient, expect_list, expect_object

ITEMS_PATH = "/inventory/items"
SUPPLIERS_PATH = "/inventory/suppliers"
ORDERS_PATH = "/inventory/orders"
DELIVERIES_PATH = "/inventory/deliveries"


@dataclass
class InventoryClient(BaseClient):
    module: str = "inventory"

    async def list_items(self) -> list[Any]:
        payload = await self._request("GET", ITEMS_PATH, operation="list_items")
        return expect_list(payload, "inventory listing")

    async def list_merged(self, search_text: str = "") -> list[InventoryMergedRow]:
        rows = merge_and_classify(await self.list_items())
        return filter_rows(rows, search_text)

    async def create_item(
        self,
        item_name: str,
        unit: str,
        current_stock: Any,
        reorder_level: Any = None,
        category: str = "",
    ) -> dict[str, Any]:
        payload = validate_new_item(item_name, unit, current_stock, reorder_level, category)
        data = await self._request("POST", ITEMS_PATH, json_body=payload, operation="create_item")
        return expect_object(data, "create item")

    async def update_item(
        self,
        item_id: str,
        item_name: str,
        current_stock: Any,
        reorder_level: Any,
        unit: str = "",
    ) -> dict[str, Any]:
        if not item_id:
            raise ValidationError.single("item_id", "Item id is required.")
        payload = validate_item_update(item_name, current_stock, reorder_level, unit)
        data = await self._request("PUT", f"{ITEMS_PATH}/{item_id}", json_body=payload, operation="update_item")
        return expect_object(data, "update item")

    async def delete_item(self, item_id: str) -> None:
        if not item_id:
            raise ValidationError.single("item_id", "Item id is required.")
        await self._request("DELETE", f"{ITEMS_PATH}/{item_id}", operation="delete_item")

    async def list_suppliers(self) -> list[Supplier]:
        payload = await self._request("GET", SUPPLIERS_PATH, operation="list_suppliers")
        return [Supplier.model_validate(row) for row in expect_list(payload, "supplier listing")]

    async def place_low_stock_order(self, row: InventoryMergedRow, supplier_id: str) -> dict[str, Any]:
        """Reorder a merged row from a supplier; the quantity is the row's reorder level."""
        if not row.reorder_level:
            raise ValidationError.single("quantity", "Item has no reorder level to order.")
        payload = validate_order(row.item_id, supplier_id, row.reorder_level)
        data = await self._request("POST", ORDERS_PATH, json_body=payload, operation="low_stock_order")
        return expect_object(data, "supply order")

    async def place_manual_order(self, item_id: str, supplier_id: str, quantity: Any) -> dict[str, Any]:
        payload = validate_order(item_id, supplier_id, quantity)
        data = await self._request("POST", ORDERS_PATH, json_body=payload, operation="manual_order")
        return expect_object(data, "supply order")

    async def list_deliveries(self) -> list[Delivery]:
        payload = await self._request("GET", DELIVERIES_PATH, operation="list_deliveries")
        return [Delivery.model_validate(row) for row in expect_list(payload, "delivery listing")]

    async def confirm_delivery(self, order_id: str) -> Delivery:
        data = await self._request(
            "PATCH",
            f"{DELIVERIES_PATH}/{order_id}/confirm-received",
            json_body={},
            operation="confirm_delivery",
        )
        order = expect_object(data, "confirm delivery").get("order")
        return Delivery.model_validate({"order_id": order_id, **expect_object(order, "delivery order")})
