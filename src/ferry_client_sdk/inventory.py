from __future__ import annotations

import logging
import warnings
from typing import Any, Iterable, Mapping

from pydantic import ValidationError as PydanticValidationError

from .exceptions import ReconciliationWarning
from .logging_utils import get_logger, log_action
from .models import InventoryLineItem, InventoryMergedRow, StockStatus

logger = get_logger(__name__)

RawInventoryRow = InventoryLineItem | Mapping[str, Any] | None


def classify_stock(current_stock: float, reorder_level: float) -> StockStatus:
    # An empty shelf is out of stock even when its reorder level is 0.
    if current_stock == 0:
        return StockStatus.OUT_OF_STOCK
    if current_stock <= reorder_level:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def _coerce_row(row: RawInventoryRow) -> InventoryLineItem | None:
    if row is None:
        return None
    if isinstance(row, InventoryLineItem):
        return row
    if not isinstance(row, Mapping):
        return None
    try:
        return InventoryLineItem.model_validate(dict(row))
    except PydanticValidationError:
        return None


def merge_and_classify(raw_items: Iterable[RawInventoryRow]) -> list[InventoryMergedRow]:
    """Collapse inventory entries sharing an item name into one row each.

    Stock is summed, the reorder level is the largest seen, and the unit and
    item id come from the first entry. Rows keep first-seen order. Null or
    malformed entries are dropped with a ``ReconciliationWarning``.
    """
    merged: dict[str, InventoryLineItem] = {}
    source_ids: dict[str, list[str]] = {}
    skipped: list[int] = []

    for index, raw in enumerate(raw_items):
        item = _coerce_row(raw)
        if item is None:
            skipped.append(index)
            continue
        key = item.item_name
        current = merged.get(key)
        if current is None:
            merged[key] = item.model_copy()
            source_ids[key] = []
        else:
            merged[key] = current.model_copy(
                update={
                    "current_stock": current.current_stock + item.current_stock,
                    "reorder_level": max(current.reorder_level, item.reorder_level),
                }
            )
        if item.item_id:
            source_ids[key].append(item.item_id)

    if skipped:
        log_action(logger, "inventory", "merge", "rows_skipped", level=logging.WARNING, skipped_rows=skipped)
        warnings.warn(
            f"Skipped {len(skipped)} malformed inventory row(s) at positions {skipped}",
            ReconciliationWarning,
            stacklevel=2,
        )

    return [
        InventoryMergedRow(
            item_name=item.item_name,
            current_stock=item.current_stock,
            reorder_level=item.reorder_level,
            unit=item.unit,
            stock_status=classify_stock(item.current_stock, item.reorder_level),
            item_id=item.item_id,
            source_ids=source_ids[name],
        )
        for name, item in merged.items()
    ]


def filter_rows(rows: Iterable[InventoryMergedRow], search_text: str) -> list[InventoryMergedRow]:
    needle = (search_text or "").strip().lower()
    if not needle:
        return list(rows)
    return [row for row in rows if needle in row.item_name.lower()]
