# manufacturing/services/bom_service.py

"""
BILL OF MATERIALS SERVICE

create_bom() saves the header with its components, operations and overheads
in ONE transaction; any invalid row rolls the whole BOM back.

Component input (dict):
    {"item": InventoryItem, "quantity": ..., "waste_percentage": ...,
     "component_type": "raw_material", "uom": ""}
Operation input:
    {"sequence": 10, "name": "...", "work_center": "", "duration_minutes": 0, "notes": ""}
Overhead input:
    {"name": "...", "cost_method": "per_unit", "value": ..., "gl_account": Account | None}
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from accounting.models.account import Account
from inventory.models import InventoryItem
from manufacturing.models import BillOfMaterials, BOMComponent, BOMOperation, BOMOverhead

logger = logging.getLogger(__name__)


class BOMError(ValueError):
    pass


class DuplicateBOMError(BOMError):
    pass


def _validation_message(exc: ValidationError) -> str:
    return "; ".join(exc.messages)


def _validate_component(company, finished_good, idx: int, row: dict) -> InventoryItem:
    item = row.get("item")
    if item is None:
        raise BOMError(f"Component {idx}: item is required")
    if item.company_id != company.pk:
        raise BOMError(f"Component {idx}: item does not belong to this company")
    if item.pk == finished_good.pk:
        raise BOMError(f"Component {idx}: the finished good cannot be its own component")
    return item


def _validate_overhead_account(company, idx: int, account: Account | None) -> None:
    if account is None:
        return
    if account.company_id != company.pk:
        raise BOMError(f"Overhead {idx}: GL account does not belong to this company")


@transaction.atomic
def create_bom(
    *,
    company,
    finished_good: InventoryItem,
    bom_code: str,
    name: str,
    version: str = "1",
    description: str = "",
    output_quantity=1,
    components=None,
    operations=None,
    overheads=None,
) -> BillOfMaterials:
    components = list(components or [])
    if not components:
        raise BOMError("A BOM needs at least one component")

    bom_code = (bom_code or "").strip().upper()
    version = (str(version or "1")).strip()
    if BillOfMaterials.objects.filter(finished_good=finished_good, bom_code=bom_code, version=version).exists():
        raise DuplicateBOMError(f"BOM {bom_code} version {version} already exists for {finished_good.sku}")

    try:
        bom = BillOfMaterials.objects.create(
            company=company,
            finished_good=finished_good,
            bom_code=bom_code,
            version=version,
            name=name,
            description=description or "",
            output_quantity=output_quantity,
        )

        for idx, row in enumerate(components, start=1):
            item = _validate_component(company, finished_good, idx, row)
            component = BOMComponent(
                bom=bom,
                item=item,
                quantity=row.get("quantity"),
                waste_percentage=row.get("waste_percentage") or 0,
                component_type=row.get("component_type") or BOMComponent.TYPE_RAW_MATERIAL,
                uom=row.get("uom") or item.uom,
            )
            component.full_clean()
            component.save()

        for row in operations or []:
            operation = BOMOperation(
                bom=bom,
                sequence=row.get("sequence") or 10,
                name=(row.get("name") or "").strip(),
                work_center=row.get("work_center") or "",
                duration_minutes=row.get("duration_minutes") or 0,
                notes=row.get("notes") or "",
            )
            operation.full_clean()
            operation.save()

        for idx, row in enumerate(overheads or [], start=1):
            _validate_overhead_account(company, idx, row.get("gl_account"))
            overhead = BOMOverhead(
                bom=bom,
                name=(row.get("name") or "").strip(),
                cost_method=row.get("cost_method") or BOMOverhead.PER_UNIT,
                value=row.get("value"),
                gl_account=row.get("gl_account"),
            )
            overhead.full_clean()
            overhead.save()
    except ValidationError as exc:
        raise BOMError(_validation_message(exc)) from exc
    except IntegrityError as exc:
        raise DuplicateBOMError(f"BOM {bom_code} version {version} already exists") from exc

    logger.info(
        "BOM created company=%s code=%s version=%s components=%s",
        company.pk,
        bom.bom_code,
        bom.version,
        len(components),
    )
    return bom
