# products/views/__init__.py

"""
Products views package exports.
"""

from .adjustment import StockAdjustmentCreateView
from .stock_batch import StockBatchViewSet

__all__ = [
    "StockAdjustmentCreateView",
    "StockBatchViewSet",
]
