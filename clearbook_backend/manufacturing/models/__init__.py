# manufacturing/models/__init__.py

from manufacturing.models.bom import BillOfMaterials, BOMComponent, BOMOperation, BOMOverhead
from manufacturing.models.production import ProductionConsumption, ProductionOrder, ProductionOrderCost

__all__ = [
    "BillOfMaterials",
    "BOMComponent",
    "BOMOperation",
    "BOMOverhead",
    "ProductionOrder",
    "ProductionOrderCost",
    "ProductionConsumption",
]
