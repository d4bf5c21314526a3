# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
"""

from .sale import Sale
from .sale_line import SaleLine
from .sale_return import SaleReturn, SaleReturnLine

__all__ = [
    "Sale",
    "SaleLine",
    "SaleReturn",
    "SaleReturnLine",
]
