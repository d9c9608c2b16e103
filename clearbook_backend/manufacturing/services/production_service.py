# manufacturing/services/production_service.py

"""
======================================================
PATH: manufacturing/services/production_service.py
======================================================
PRODUCTION ORDERS (WEIGHTED-AVERAGE COSTING)

Lifecycle:
    Planned -> In Progress -> Completed
    Planned / In Progress -> Cancelled

Planned costs (frozen at creation):
- material = SUM(component.quantity * item.average_unit_cost) * quantity_to_produce
- overhead, per BOMOverhead.cost_method:
    per_unit               value * quantity_to_produce
    per_batch              value
    percentage_of_material planned material * value / 100

Completion (ONE transaction; any failure rolls back stock + ledger):
1) consume each component (quantity * produced, + waste % if requested)
   at its current average cost
2) post ONE voucher (source=Production):
       Dr finished good inventory      total
       Cr component inventory account  material cost (per component)
       Cr overhead GL account          planned overhead cost
3) receive the finished good at total / quantity (weighted average)
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import get_account_by_role
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.money import ZERO, q2, q4
from accounting.services.numbering import next_sequence_number
from inventory.models import StockMovement
from inventory.services.stock_service import InventoryError, consume_stock, receive_stock, to_quantity
from manufacturing.models import (
    BillOfMaterials,
    BOMOverhead,
    ProductionConsumption,
    ProductionOrder,
    ProductionOrderCost,
)

logger = logging.getLogger(__name__)


class ProductionError(ValueError):
    pass


class ProductionStateError(ProductionError):
    pass


def next_production_number(company, order_date) -> str:
    return next_sequence_number(
        company=company,
        queryset=ProductionOrder.objects.filter(company=company),
        field="order_number",
        prefix=f"PRD-{order_date.year}-",
        width=5,
    )


def planned_material_cost(bom: BillOfMaterials, quantity: Decimal) -> Decimal:
    per_unit = sum(
        (c.quantity * c.item.average_unit_cost for c in bom.components.select_related("item")),
        Decimal("0"),
    )
    return q2(per_unit * quantity)


def overhead_cost(overhead: BOMOverhead, quantity: Decimal, material_cost: Decimal) -> Decimal:
    if overhead.cost_method == BOMOverhead.PER_UNIT:
        return q2(overhead.value * quantity)
    if overhead.cost_method == BOMOverhead.PER_BATCH:
        return q2(overhead.value)
    if overhead.cost_method == BOMOverhead.PERCENTAGE_OF_MATERIAL:
        return q2(material_cost * overhead.value / Decimal("100"))
    raise ProductionError(f"Unknown cost method: {overhead.cost_method}")


def _lock_order(order: ProductionOrder) -> ProductionOrder:
    return ProductionOrder.objects.select_for_update().get(pk=order.pk)


def _require_status(order: ProductionOrder, allowed: set, action: str) -> None:
    if order.status not in allowed:
        logger.warning("Production %s refused order=%s status=%s", action, order.order_number, order.status)
        raise ProductionStateError(f"Cannot {action} a production order that is {order.status}")


@transaction.atomic
def create_production_order(
    *,
    company,
    bom: BillOfMaterials,
    quantity_to_produce,
    order_date=None,
    notes: str = "",
    user=None,
) -> ProductionOrder:
    if bom.company_id != company.pk:
        raise ProductionError("BOM does not belong to this company")
    if not bom.is_active:
        raise ProductionError(f"BOM {bom} is inactive")

    try:
        quantity = to_quantity(quantity_to_produce, field_name="quantity_to_produce")
    except InventoryError as exc:
        raise ProductionError(str(exc)) from exc
    if quantity <= 0:
        raise ProductionError("quantity_to_produce must be greater than zero")

    order_date = order_date or timezone.localdate()
    material = planned_material_cost(bom, quantity)

    order = ProductionOrder.objects.create(
        company=company,
        order_number=next_production_number(company, order_date),
        bom=bom,
        product=bom.finished_good,
        quantity_to_produce=quantity,
        planned_material_cost=material,
        notes=notes or "",
        order_date=order_date,
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    overhead_total = ZERO
    for overhead in bom.overheads.all():
        amount = overhead_cost(overhead, quantity, material)
        overhead_total += amount
        ProductionOrderCost.objects.create(
            production_order=order,
            overhead=overhead,
            cost_type=ProductionOrderCost.TYPE_DIRECT if overhead.is_labour else ProductionOrderCost.TYPE_MISC,
            description=f"Planned: {overhead.name}",
            amount=amount,
        )

    order.planned_overhead_cost = q2(overhead_total)
    order.save(update_fields=["planned_overhead_cost", "updated_at"])

    logger.info(
        "Production order created company=%s number=%s qty=%s material=%s overhead=%s",
        company.pk,
        order.order_number,
        quantity,
        material,
        order.planned_overhead_cost,
    )
    return order


@transaction.atomic
def start_production_order(*, order: ProductionOrder) -> ProductionOrder:
    order = _lock_order(order)
    _require_status(order, {ProductionOrder.STATUS_PLANNED}, "start")

    order.status = ProductionOrder.STATUS_IN_PROGRESS
    order.save(update_fields=["status", "updated_at"])
    logger.info("Production started number=%s", order.order_number)
    return order


@transaction.atomic
def cancel_production_order(*, order: ProductionOrder) -> ProductionOrder:
    order = _lock_order(order)
    _require_status(order, ProductionOrder.OPEN_STATUSES, "cancel")

    order.status = ProductionOrder.STATUS_CANCELLED
    order.save(update_fields=["status", "updated_at"])
    logger.info("Production cancelled number=%s", order.order_number)
    return order


def _overhead_account(company, overhead: BOMOverhead | None) -> Account:
    if overhead is not None and overhead.gl_account_id:
        return overhead.gl_account
    return get_account_by_role(company, Account.MANUFACTURING_OVERHEAD)


@transaction.atomic
def complete_production_order(
    *,
    order: ProductionOrder,
    quantity_produced=None,
    include_waste: bool = False,
    completion_date=None,
    user=None,
) -> ProductionOrder:
    order = _lock_order(order)
    _require_status(order, ProductionOrder.OPEN_STATUSES, "complete")

    try:
        produced = to_quantity(
            order.quantity_to_produce if quantity_produced in (None, "") else quantity_produced,
            field_name="quantity_produced",
        )
    except InventoryError as exc:
        raise ProductionError(str(exc)) from exc
    if produced <= 0:
        raise ProductionError("quantity_produced must be greater than zero")

    company = order.company
    completion_date = completion_date or timezone.localdate()
    finished_good = order.product

    # 1) consume components
    material_total = ZERO
    credit_lines = []
    for component in order.bom.components.select_related("item", "item__inventory_account"):
        needed = component.quantity * produced
        if include_waste and component.waste_percentage:
            needed = needed * (Decimal("1") + component.waste_percentage / Decimal("100"))
        needed = q4(needed)

        movement = consume_stock(
            item=component.item,
            quantity=needed,
            movement_type=StockMovement.MovementType.PRODUCTION_OUT,
            reference=order.order_number,
            user=user,
        )
        cost = q2(needed * movement.unit_cost_snapshot)
        material_total += cost

        ProductionConsumption.objects.create(
            production_order=order,
            item=component.item,
            quantity_consumed=needed,
            unit_cost_at_consumption=movement.unit_cost_snapshot,
            total_cost=cost,
        )
        if cost > ZERO:
            credit_lines.append(
                {
                    "account": component.item.inventory_account,
                    "credit": cost,
                    "description": f"{component.item.sku} x {needed}",
                }
            )

    # 2) absorb planned overheads
    overhead_total = ZERO
    for cost_row in order.costs.select_related("overhead", "overhead__gl_account"):
        if cost_row.amount <= ZERO:
            continue
        overhead_total += cost_row.amount
        try:
            gl_account = _overhead_account(company, cost_row.overhead)
        except AccountingServiceError as exc:
            raise ProductionError(str(exc)) from exc
        credit_lines.append(
            {"account": gl_account, "credit": cost_row.amount, "description": cost_row.description}
        )

    total = q2(material_total + overhead_total)

    voucher = None
    if total > ZERO:
        voucher = post_system_voucher(
            company=company,
            entry_date=completion_date,
            narration=f"Production {order.order_number}: {produced} x {finished_good.sku}",
            source=JournalVoucher.SOURCE_PRODUCTION,
            reference_type="PRODUCTION",
            reference_id=order.pk,
            created_by=user,
            lines=[
                {
                    "account": finished_good.inventory_account,
                    "debit": total,
                    "description": f"{finished_good.sku} x {produced}",
                },
                *credit_lines,
            ],
        )

    # 3) finished goods in at production cost
    unit_cost = q4(total / produced)
    receive_stock(
        item=finished_good,
        quantity=produced,
        unit_cost=unit_cost,
        movement_type=StockMovement.MovementType.PRODUCTION_IN,
        reference=order.order_number,
        user=user,
    )

    order.status = ProductionOrder.STATUS_COMPLETED
    order.quantity_produced = produced
    order.total_material_cost = q2(material_total)
    order.total_overhead_cost = q2(overhead_total)
    order.cost_per_unit = unit_cost
    order.completion_date = completion_date
    order.journal_voucher = voucher
    order.save()

    logger.info(
        "Production completed number=%s produced=%s material=%s overhead=%s unit_cost=%s",
        order.order_number,
        produced,
        order.total_material_cost,
        order.total_overhead_cost,
        unit_cost,
    )
    return order
