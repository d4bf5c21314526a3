"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .product import Product
from .stock_batch import StockBatch
from .inventory_aggregate import InventoryAggregate
from .stock_movement import StockMovement
from .stock_adjustment import StockAdjustment, StockAdjustmentLine

__all__ = [
    "Product",
    "StockBatch",
    "InventoryAggregate",
    "StockMovement",
    "StockAdjustment",
    "StockAdjustmentLine",
]
