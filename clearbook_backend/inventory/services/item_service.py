# inventory/services/item_service.py

"""
ITEM REGISTRY + OPENING BALANCES

Opening stock accounting effect:
- Dr item.inventory_account
- Cr OPENING_BALANCE_EQUITY

An item takes one opening balance, and only before any other stock movement.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction

from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import (
    get_default_inventory_account,
    get_opening_balance_equity_account,
)
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.money import ZERO, q2
from inventory.models import InventoryItem, StockMovement
from inventory.services.stock_service import (
    InventoryError,
    lock_item,
    receive_stock,
    to_quantity,
    to_unit_cost,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "name",
    "description",
    "category",
    "uom",
    "selling_price",
    "reorder_level",
    "inventory_account",
    "is_active",
)


class DuplicateSkuError(InventoryError):
    pass


@transaction.atomic
def register_item(
    *,
    company,
    sku: str,
    name: str,
    item_type: str = InventoryItem.TYPE_PRODUCT,
    description: str = "",
    category: str = "",
    uom: str = "unit",
    unit_cost=None,
    selling_price=None,
    reorder_level=None,
    inventory_account=None,
) -> InventoryItem:
    sku = (sku or "").strip().upper()
    if item_type not in dict(InventoryItem.ITEM_TYPES):
        raise InventoryError(f"Invalid item_type: {item_type}")
    if InventoryItem.objects.filter(company=company, sku=sku).exists():
        raise DuplicateSkuError("This SKU is already in use. Please choose a different one.")

    if inventory_account is None:
        try:
            inventory_account = get_default_inventory_account(company, item_type)
        except AccountingServiceError as exc:
            raise InventoryError(str(exc)) from exc

    try:
        item = InventoryItem.objects.create(
            company=company,
            sku=sku,
            name=name,
            item_type=item_type,
            description=description or "",
            category=category or "",
            uom=uom or "unit",
            average_unit_cost=to_unit_cost(unit_cost) if unit_cost not in (None, "") else Decimal("0"),
            selling_price=q2(selling_price or 0),
            reorder_level=to_quantity(reorder_level or 0, field_name="reorder_level"),
            inventory_account=inventory_account,
        )
    except ValidationError as exc:
        raise InventoryError("; ".join(exc.messages)) from exc

    logger.info("Item registered company=%s sku=%s type=%s", company.pk, item.sku, item.item_type)
    return item


@transaction.atomic
def update_item(*, item: InventoryItem, **changes) -> InventoryItem:
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise InventoryError(f"Fields cannot be changed: {', '.join(sorted(unknown))}")

    item = lock_item(item)
    for field, value in changes.items():
        if field == "selling_price":
            value = q2(value or 0)
        elif field == "reorder_level":
            value = to_quantity(value or 0, field_name="reorder_level")
        setattr(item, field, value)

    try:
        item.save()
    except ValidationError as exc:
        raise InventoryError("; ".join(exc.messages)) from exc
    return item


@transaction.atomic
def record_opening_balance(*, item: InventoryItem, quantity, unit_cost, as_of, user=None):
    """
    Returns (movement, voucher). voucher is None when the opening value is zero.
    """
    qty = to_quantity(quantity)
    if qty <= 0:
        raise InventoryError("quantity must be greater than zero")
    cost = to_unit_cost(unit_cost)

    item = lock_item(item)
    if item.stock_movements.exists():
        raise InventoryError(
            f"Opening balance for {item.sku} must be recorded before any other stock movement"
        )

    movement = receive_stock(
        item=item,
        quantity=qty,
        unit_cost=cost,
        movement_type=StockMovement.MovementType.OPENING,
        reference=f"OPENING:{as_of.isoformat()}",
        user=user,
    )

    value = q2(qty * cost)
    voucher = None
    if value > ZERO:
        try:
            voucher = post_system_voucher(
                company=item.company,
                entry_date=as_of,
                narration=f"Opening stock {item.sku} - {item.name}",
                source=JournalVoucher.SOURCE_OPENING_BALANCE,
                reference_type="ITEM_OPENING",
                reference_id=item.pk,
                created_by=user,
                lines=[
                    {"account": item.inventory_account, "debit": value},
                    {"account": get_opening_balance_equity_account(item.company), "credit": value},
                ],
            )
        except AccountingServiceError as exc:
            raise InventoryError(str(exc)) from exc

    return movement, voucher
