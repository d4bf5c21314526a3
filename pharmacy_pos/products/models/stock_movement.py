# products/models/stock_movement.py

"""
STOCK MOVEMENT HISTORY

Immutable ledger entry written by products.services.stock_ledger.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity_delta is signed and never zero
- Direction validated against reason (SALE out, RECEIPT/RETURN in)
- balance_after is the batch quantity right after the write
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product
from .stock_batch import StockBatch


class StockMovement(models.Model):
    class Reason(models.TextChoices):
        RECEIPT = "RECEIPT", "Stock Receipt"
        SALE = "SALE", "Sale"
        RETURN = "RETURN", "Sale Return"
        ADJUSTMENT = "ADJUSTMENT", "Manual Adjustment"

    # +1 inbound, -1 outbound, None either way
    REASON_SIGN = {
        Reason.RECEIPT: 1,
        Reason.RETURN: 1,
        Reason.SALE: -1,
        Reason.ADJUSTMENT: None,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_movements"
    )
    batch = models.ForeignKey(
        StockBatch, on_delete=models.PROTECT, related_name="stock_movements"
    )

    reason = models.CharField(max_length=20, choices=Reason.choices)

    quantity_delta = models.IntegerField()
    balance_after = models.IntegerField()

    # Loose reference to the originating document (sale, return, adjustment, receiving)
    reference_type = models.CharField(max_length=40, blank=True, default="")
    reference_id = models.CharField(max_length=64, blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["product", "created_at"], name="movement_product_created_idx"),
            models.Index(fields=["batch", "created_at"], name="movement_batch_created_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="movement_reference_idx"),
        ]

    def clean(self):
        if not self.quantity_delta:
            raise ValidationError("quantity_delta cannot be zero")

        sign = self.REASON_SIGN.get(self.reason)
        if sign is not None and (self.quantity_delta > 0) != (sign > 0):
            raise ValidationError(
                f"{self.reason} movements must be {'inbound' if sign > 0 else 'outbound'}"
            )

        if self.balance_after is not None and self.balance_after < 0:
            raise ValidationError("balance_after cannot be negative")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.reason} | {self.quantity_delta:+d}"
