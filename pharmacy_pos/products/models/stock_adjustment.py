# products/models/stock_adjustment.py

"""
STOCK ADJUSTMENT (PHYSICAL COUNT CORRECTION)

Header + lines recording an authoritative recount per batch.
Each line snapshots quantity_before / quantity_after / quantity_delta
at the moment the ledger applied it.
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from .stock_batch import StockBatch


class StockAdjustment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_adjustments",
    )

    reason = models.CharField(max_length=255)
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Adjustment {self.id} ({self.reason})"


class StockAdjustmentLine(models.Model):
    id = models.BigAutoField(primary_key=True)

    adjustment = models.ForeignKey(
        StockAdjustment,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    batch = models.ForeignKey(
        StockBatch,
        on_delete=models.PROTECT,
        related_name="adjustment_lines",
    )

    quantity_before = models.PositiveIntegerField()
    quantity_after = models.PositiveIntegerField()
    quantity_delta = models.IntegerField()

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["adjustment", "batch"],
                name="unique_batch_per_adjustment",
            ),
            models.CheckConstraint(
                condition=Q(quantity_delta=F("quantity_after") - F("quantity_before")),
                name="chk_adjustmentline_delta_consistent",
            ),
        ]

    def __str__(self):
        return f"{self.batch_id}: {self.quantity_before} -> {self.quantity_after}"
