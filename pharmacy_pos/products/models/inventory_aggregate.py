# products/models/inventory_aggregate.py

"""
INVENTORY AGGREGATE

One row per product mirroring Product.stock_total for consumers that
read the aggregate table directly. Upserted by the stock ledger only.
"""

from django.db import models
from django.db.models import Q

from .product import Product


class InventoryAggregate(models.Model):
    product = models.OneToOneField(
        Product,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="inventory",
    )

    total_stock = models.IntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(total_stock__gte=0),
                name="chk_inventory_total_stock_gte_zero",
            ),
        ]

    def __str__(self):
        return f"{self.product_id}: {self.total_stock}"
