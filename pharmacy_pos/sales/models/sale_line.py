# sales/models/sale_line.py

"""
SALE LINE (PRICED SNAPSHOT)

One ordered line of a sale, bound to the exact batch it was sold from.

Notes:
- Prices and computed amounts are snapshots; never recomputed later.
- quantity_returned is the only mutable field and only grows,
  via a guarded UPDATE in the return processor.
- DB check: quantity_returned <= quantity.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models
from django.db.models import F, Q

from products.models import Product, StockBatch

from .sale import Sale


class SaleLine(models.Model):
    id = models.BigAutoField(primary_key=True)

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    line_no = models.PositiveIntegerField()

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="sale_lines",
    )

    batch = models.ForeignKey(
        StockBatch,
        on_delete=models.PROTECT,
        related_name="sale_lines",
    )

    quantity = models.PositiveIntegerField()

    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    discount_pct = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    tax_pct = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))

    subtotal_amount = models.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2)
    line_total = models.DecimalField(max_digits=12, decimal_places=2)

    quantity_returned = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sale", "line_no"]
        constraints = [
            models.UniqueConstraint(
                fields=["sale", "line_no"],
                name="unique_line_no_per_sale",
            ),
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_saleline_quantity_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(quantity_returned__lte=F("quantity")),
                name="chk_saleline_returned_lte_quantity",
            ),
        ]

    @property
    def remaining_quantity(self) -> int:
        return int(self.quantity) - int(self.quantity_returned or 0)

    def __str__(self):
        return f"{self.sale_id}#{self.line_no} {self.product_id} x {self.quantity}"
