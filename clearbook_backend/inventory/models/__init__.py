# inventory/models/__init__.py

from inventory.models.item import InventoryItem
from inventory.models.material_issue import MaterialIssue
from inventory.models.price_tier import PriceTier
from inventory.models.stock_movement import StockMovement

__all__ = [
    "InventoryItem",
    "StockMovement",
    "MaterialIssue",
    "PriceTier",
]
