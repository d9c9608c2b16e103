# inventory/services/stock_service.py

"""
======================================================
PATH: inventory/services/stock_service.py
======================================================
STOCK ENGINE (WEIGHTED AVERAGE)

This module is the ONLY place allowed to:
- Change InventoryItem.quantity_on_hand / average_unit_cost
- Create StockMovement rows

Rules:
- Every change locks the item row (select_for_update) first.
- Receipts re-average cost:
      new_avg = (old_qty * old_cost + qty * unit_cost) / (old_qty + qty)
  and when the resulting quantity is <= 0 the receipt cost is taken as-is.
- Issues never re-average; they snapshot the current average.
- Stock never goes negative (InsufficientStockError).

Callers must already be inside transaction.atomic.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from accounting.services.money import q4
from inventory.models import InventoryItem, StockMovement

logger = logging.getLogger(__name__)

ZERO_QTY = Decimal("0.0000")


class InventoryError(ValueError):
    pass


class InsufficientStockError(InventoryError):
    pass


def to_quantity(value, *, field_name="quantity") -> Decimal:
    if value is None or value == "":
        raise InventoryError(f"{field_name} is required")
    if isinstance(value, bool):
        raise InventoryError(f"{field_name} must be a number")
    try:
        qty = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InventoryError(f"{field_name} must be a valid decimal") from exc
    return q4(qty)


def to_unit_cost(value, *, field_name="unit_cost") -> Decimal:
    cost = to_quantity(value, field_name=field_name)
    if cost < 0:
        raise InventoryError(f"{field_name} cannot be negative")
    return cost


def lock_item(item: InventoryItem) -> InventoryItem:
    return InventoryItem.objects.select_for_update().get(pk=item.pk)


def weighted_average(old_qty: Decimal, old_cost: Decimal, qty: Decimal, unit_cost: Decimal) -> Decimal:
    new_qty = old_qty + qty
    if new_qty <= 0:
        return q4(unit_cost)
    return q4((old_qty * old_cost + qty * unit_cost) / new_qty)


def _record(item, movement_type, quantity, unit_cost, reference, user) -> StockMovement:
    return StockMovement.objects.create(
        item=item,
        movement_type=movement_type,
        quantity=quantity,
        unit_cost_snapshot=unit_cost,
        balance_after=item.quantity_on_hand,
        reference=(reference or "")[:100],
        performed_by=user if getattr(user, "is_authenticated", False) else None,
    )


def receive_stock(
    *,
    item: InventoryItem,
    quantity,
    unit_cost,
    movement_type: str = StockMovement.MovementType.RECEIPT,
    reference: str = "",
    user=None,
) -> StockMovement:
    if movement_type not in StockMovement.INBOUND:
        raise InventoryError(f"{movement_type} is not an inbound movement")

    qty = to_quantity(quantity)
    if qty <= 0:
        raise InventoryError("quantity must be greater than zero")
    cost = to_unit_cost(unit_cost)

    item = lock_item(item)
    item.average_unit_cost = weighted_average(
        item.quantity_on_hand, item.average_unit_cost, qty, cost
    )
    item.quantity_on_hand = q4(item.quantity_on_hand + qty)
    item.save(update_fields=["quantity_on_hand", "average_unit_cost", "updated_at"])

    movement = _record(item, movement_type, qty, cost, reference, user)
    logger.info(
        "Stock in item=%s type=%s qty=%s cost=%s balance=%s",
        item.sku,
        movement_type,
        qty,
        cost,
        item.quantity_on_hand,
    )
    return movement


def ensure_available(item: InventoryItem, quantity) -> None:
    qty = to_quantity(quantity)
    if qty > item.quantity_on_hand:
        raise InsufficientStockError(
            f"Insufficient stock for {item.sku}: requested {qty}, available {item.quantity_on_hand}"
        )


def consume_stock(
    *,
    item: InventoryItem,
    quantity,
    movement_type: str = StockMovement.MovementType.ISSUE,
    reference: str = "",
    user=None,
) -> StockMovement:
    """
    Take stock out at the current average cost.

    The returned movement carries the cost basis (unit_cost_snapshot).
    """
    if movement_type not in StockMovement.OUTBOUND:
        raise InventoryError(f"{movement_type} is not an outbound movement")

    qty = to_quantity(quantity)
    if qty <= 0:
        raise InventoryError("quantity must be greater than zero")

    item = lock_item(item)
    ensure_available(item, qty)

    item.quantity_on_hand = q4(item.quantity_on_hand - qty)
    item.save(update_fields=["quantity_on_hand", "updated_at"])

    movement = _record(item, movement_type, -qty, item.average_unit_cost, reference, user)
    logger.info(
        "Stock out item=%s type=%s qty=%s cost=%s balance=%s",
        item.sku,
        movement_type,
        qty,
        item.average_unit_cost,
        item.quantity_on_hand,
    )
    return movement


def item_history(item: InventoryItem):
    return item.stock_movements.select_related("performed_by").order_by("created_at", "id")
