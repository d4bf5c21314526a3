# sales/serializers/__init__.py

from .sale import SaleCreateSerializer, SaleLineSerializer, SaleSerializer
from .sale_return import SaleReturnCreateSerializer, SaleReturnSerializer

__all__ = [
    "SaleCreateSerializer",
    "SaleLineSerializer",
    "SaleSerializer",
    "SaleReturnCreateSerializer",
    "SaleReturnSerializer",
]
