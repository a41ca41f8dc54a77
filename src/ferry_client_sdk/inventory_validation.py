from __future__ import annotations

import math
from typing import Any

from .exceptions import ValidationError, ValidationIssue


def as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_new_item(
    item_name: str | None,
    unit: str | None,
    current_stock: Any,
    reorder_level: Any = None,
    category: str | None = "",
) -> dict[str, Any]:
    issues: list[ValidationIssue] = []
    if is_blank(item_name):
        issues.append(ValidationIssue("item_name", "Item Name is required."))
    if is_blank(unit):
        issues.append(ValidationIssue("unit", "Unit is required."))
    stock = as_number(current_stock)
    if stock is None or stock < 0:
        issues.append(ValidationIssue("current_stock", "Current Stock must be a non-negative number."))
    reorder = 0.0
    if not is_blank(reorder_level):
        parsed = as_number(reorder_level)
        if parsed is None or parsed < 0:
            issues.append(
                ValidationIssue("reorder_level", "Reorder Level must be a non-negative number if provided.")
            )
        else:
            reorder = parsed
    if issues:
        raise ValidationError(issues)
    return {
        "item_name": item_name.strip(),
        "category": (category or "").strip(),
        "unit": unit.strip(),
        "current_stock": stock,
        "reorder_level": reorder,
    }


def validate_item_update(
    item_name: str | None,
    current_stock: Any,
    reorder_level: Any,
    unit: str | None = "",
) -> dict[str, Any]:
    stock = as_number(current_stock)
    reorder = as_number(reorder_level)
    if is_blank(item_name) or stock is None or reorder is None:
        raise ValidationError.single("item", "Name, Stock, and Reorder level are required.")
    issues: list[ValidationIssue] = []
    if stock < 0:
        issues.append(ValidationIssue("current_stock", "Current Stock must be a non-negative number."))
    if reorder < 0:
        issues.append(ValidationIssue("reorder_level", "Reorder Level must be a non-negative number."))
    if issues:
        raise ValidationError(issues)
    return {
        "item_name": item_name.strip(),
        "current_stock": stock,
        "reorder_level": reorder,
        "unit": (unit or "").strip(),
    }


def validate_order(item_id: str | None, supplier_id: str | None, quantity: Any) -> dict[str, Any]:
    if is_blank(item_id) or is_blank(supplier_id) or is_blank(quantity):
        raise ValidationError.single("order", "Please fill all fields.")
    amount = as_number(quantity)
    if amount is None or amount <= 0:
        raise ValidationError.single("quantity", "Quantity must be a positive number.")
    return {"item_id": item_id, "supplier_id": supplier_id, "quantity": amount}
