# sales/models/sale_return.py

"""
======================================================
PATH: sales/models/sale_return.py
======================================================
SALE RETURN (PARTIAL / TOTAL)

Purpose:
- Append-only record of goods returned against a sale.
- Each line points at the original SaleLine and snapshots its batch
  and unit price, so the refund is reproducible.

Design guarantees:
- Multiple returns per sale allowed
- Over-returning is prevented at service layer AND by the
  SaleLine quantity_returned <= quantity check constraint
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from products.models import StockBatch

from .sale import Sale
from .sale_line import SaleLine

User = settings.AUTH_USER_MODEL


class SaleReturn(models.Model):
    class ReturnType(models.TextChoices):
        PARTIAL = "partial", "Partial"
        TOTAL = "total", "Total"

    class RefundMethod(models.TextChoices):
        CASH = "cash", "Cash"
        CARD = "card", "Card"
        TRANSFER = "transfer", "Transfer"
        CREDIT = "credit", "Store credit"

    STATUS_COMPLETED = "completed"
    STATUS_CHOICES = [(STATUS_COMPLETED, "Completed")]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        Sale,
        on_delete=models.PROTECT,
        related_name="returns",
    )

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sale_returns",
    )

    return_type = models.CharField(max_length=16, choices=ReturnType.choices)
    reason = models.CharField(max_length=255)
    notes = models.TextField(blank=True, default="")
    refund_method = models.CharField(max_length=16, choices=RefundMethod.choices)

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_COMPLETED,
    )

    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["sale", "created_at"], name="salereturn_sale_created_idx"),
        ]

    def __str__(self):
        return f"Return {self.id} | Sale {self.sale_id} | {self.total_amount}"


class SaleReturnLine(models.Model):
    id = models.BigAutoField(primary_key=True)

    sale_return = models.ForeignKey(
        SaleReturn,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    sale_line = models.ForeignKey(
        SaleLine,
        on_delete=models.PROTECT,
        related_name="return_lines",
    )

    # Snapshot of sale_line.batch at return time
    batch = models.ForeignKey(
        StockBatch,
        on_delete=models.PROTECT,
        related_name="return_lines",
    )

    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2)
    reason = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_returnline_quantity_gt_zero",
            ),
        ]

    def __str__(self):
        return f"{self.sale_line_id} x {self.quantity}"
