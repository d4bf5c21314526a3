# products/apps.py

"""
PRODUCTS APP CONFIG

Products, expiry-dated stock batches and the stock ledger:
- StockBatch / Product / InventoryAggregate counters
- StockMovement history
- Physical-count adjustments
"""

from django.apps import AppConfig


class ProductsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "products"
    verbose_name = "Products & Stock"
