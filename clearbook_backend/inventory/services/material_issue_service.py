# inventory/services/material_issue_service.py

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from accounting.services.money import q2
from accounting.services.numbering import next_sequence_number
from inventory.models import InventoryItem, MaterialIssue, StockMovement
from inventory.services.stock_service import InventoryError, consume_stock

logger = logging.getLogger(__name__)


def next_issue_number(company, issue_date) -> str:
    return next_sequence_number(
        company=company,
        queryset=MaterialIssue.objects.filter(company=company),
        field="issue_number",
        prefix=f"MI-{issue_date:%Y%m%d}-",
        width=4,
    )


@transaction.atomic
def issue_material(
    *,
    company,
    item: InventoryItem,
    quantity,
    issued_to: str,
    purpose: str = "",
    production_order=None,
    issue_date=None,
    user=None,
) -> MaterialIssue:
    if item.company_id != company.pk:
        raise InventoryError("Item does not belong to this company")
    if not item.is_active:
        raise InventoryError(f"Item {item.sku} is inactive")

    issued_to = (issued_to or "").strip()
    if not issued_to:
        raise InventoryError("issued_to is required")

    if production_order is not None and production_order.company_id != company.pk:
        raise InventoryError("Production order does not belong to this company")

    issue_date = issue_date or timezone.localdate()
    number = next_issue_number(company, issue_date)

    movement = consume_stock(
        item=item,
        quantity=quantity,
        movement_type=StockMovement.MovementType.ISSUE,
        reference=number,
        user=user,
    )
    qty = -movement.quantity

    issue = MaterialIssue.objects.create(
        company=company,
        issue_number=number,
        item=item,
        quantity=qty,
        unit_cost_at_issue=movement.unit_cost_snapshot,
        total_cost=q2(qty * movement.unit_cost_snapshot),
        issued_to=issued_to,
        purpose=purpose or "",
        production_order=production_order,
        issued_by=user if getattr(user, "is_authenticated", False) else None,
        issue_date=issue_date,
    )
    logger.info("Material issued company=%s number=%s item=%s qty=%s", company.pk, number, item.sku, qty)
    return issue
