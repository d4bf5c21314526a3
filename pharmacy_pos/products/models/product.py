# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL (IMPORTANT):
    - Physical stock lives in StockBatch.available_qty
    - stock_total is a DERIVED counter owned by the stock ledger:
        stock_total == sum(available_qty) of this product's ACTIVE batches
    - Never write stock_total outside products.services.stock_ledger
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    barcode = models.CharField(max_length=64, blank=True, default="", db_index=True)

    # Current/default selling price (snapshot at sale time lives on SaleLine)
    sale_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    min_stock = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)

    # Ledger-owned
    stock_total = models.IntegerField(default=0, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(stock_total__gte=0),
                name="chk_product_stock_total_gte_zero",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.sale_price is None or Decimal(self.sale_price) < 0:
            raise ValidationError({"sale_price": "sale_price cannot be negative"})

    @property
    def is_low_stock(self) -> bool:
        return int(self.stock_total or 0) <= int(self.min_stock or 0)

    def save(self, *args, **kwargs):
        # stock_total is written only by the ledger's F() update
        if not self._state.adding and kwargs.get("update_fields") is None:
            kwargs["update_fields"] = [
                f.name
                for f in self._meta.concrete_fields
                if not f.primary_key and f.name != "stock_total"
            ]
        return super().save(*args, **kwargs)
