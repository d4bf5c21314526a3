# products/serializers/__init__.py

from .stock_batch import StockBatchSerializer
from .adjustment import (
    AdjustmentCreateSerializer,
    StockAdjustmentSerializer,
)

__all__ = [
    "StockBatchSerializer",
    "AdjustmentCreateSerializer",
    "StockAdjustmentSerializer",
]
