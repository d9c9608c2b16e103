# inventory/services/price_tier_service.py

"""
PRICE TIERS

Named selling prices per product. A tier name is unique per item
(case-insensitive); a clash raises DuplicatePriceTierError (409 at the API).
Only product items carry tiers; raw materials are not sold.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from accounting.services.money import ZERO, money
from inventory.models import InventoryItem, PriceTier
from inventory.services.stock_service import InventoryError

logger = logging.getLogger(__name__)


class PriceTierError(InventoryError):
    pass


class DuplicatePriceTierError(PriceTierError):
    pass


def _clean_name(tier_name: str) -> str:
    name = (tier_name or "").strip()
    if not name:
        raise PriceTierError("Tier name is required")
    return name


def _clean_price(price):
    price = money(price)
    if price < ZERO:
        raise PriceTierError("Tier price cannot be negative")
    return price


def _assert_unique(item: InventoryItem, name: str, exclude_pk=None) -> None:
    clash = PriceTier.objects.filter(item=item, tier_name__iexact=name)
    if exclude_pk is not None:
        clash = clash.exclude(pk=exclude_pk)
    if clash.exists():
        raise DuplicatePriceTierError(f"{item.sku} already has a price tier named {name!r}")


def list_price_tiers(item: InventoryItem):
    return PriceTier.objects.filter(item=item).order_by("price", "tier_name")


@transaction.atomic
def create_price_tier(*, item: InventoryItem, tier_name: str, price) -> PriceTier:
    if item.item_type != InventoryItem.TYPE_PRODUCT:
        raise PriceTierError("Price tiers can only be set on products")

    name = _clean_name(tier_name)
    _assert_unique(item, name)
    try:
        tier = PriceTier.objects.create(company=item.company, item=item, tier_name=name, price=_clean_price(price))
    except ValidationError as exc:
        raise PriceTierError("; ".join(exc.messages)) from exc

    logger.info("Price tier created company=%s sku=%s tier=%s price=%s", item.company_id, item.sku, name, tier.price)
    return tier


@transaction.atomic
def update_price_tier(*, tier: PriceTier, tier_name: str | None = None, price=None) -> PriceTier:
    tier = PriceTier.objects.select_for_update().select_related("item").get(pk=tier.pk)
    if tier_name is not None:
        name = _clean_name(tier_name)
        _assert_unique(tier.item, name, exclude_pk=tier.pk)
        tier.tier_name = name
    if price is not None:
        tier.price = _clean_price(price)

    try:
        tier.save()
    except ValidationError as exc:
        raise PriceTierError("; ".join(exc.messages)) from exc
    return tier


@transaction.atomic
def delete_price_tier(*, tier: PriceTier) -> None:
    logger.info("Price tier deleted company=%s tier=%s", tier.company_id, tier.pk)
    tier.delete()


def tier_price(item: InventoryItem, tier_name: str):
    """Price of the named tier for `item`; PriceTierError when the item has no such tier."""
    tier = PriceTier.objects.filter(item=item, tier_name__iexact=(tier_name or "").strip()).first()
    if tier is None:
        raise PriceTierError(f"{item.sku} has no price tier named {tier_name!r}")
    return tier.price
