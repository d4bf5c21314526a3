# products/models/stock_batch.py

"""
STOCK BATCH (EXPIRY-DATED LOT)

One physical lot of a product with its own expiry date.

LIFECYCLE:
- born INACTIVE with available_qty=0 (receiving draft)
- activated + credited on receiving approval
- debited by sales, credited by returns, corrected by adjustments
- may reach zero; is NEVER deleted (sale lines + movements reference it)

RULES:
- available_qty is mutated ONLY by products.services.stock_ledger
- version is bumped on every ledger write
- available_qty >= 0 is enforced by a DB check constraint as well
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .product import Product


class StockBatch(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="stock_batches",
    )

    batch_code = models.CharField(
        max_length=128,
        help_text="Manufacturer / supplier lot code",
    )

    expiry_date = models.DateField()

    available_qty = models.IntegerField(
        default=0,
        help_text="Remaining quantity (ledger-managed only)",
    )

    purchase_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    is_active = models.BooleanField(default=False)

    version = models.PositiveIntegerField(default=0, editable=False)

    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["expiry_date", "created_at"]
        indexes = [
            models.Index(fields=["product", "is_active", "expiry_date"], name="batch_prod_active_expiry_idx"),
            models.Index(fields=["expiry_date"], name="batch_expiry_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "batch_code"],
                name="unique_batch_code_per_product",
            ),
            models.CheckConstraint(
                condition=Q(available_qty__gte=0),
                name="chk_stockbatch_available_qty_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(purchase_price__gte=0),
                name="chk_stockbatch_purchase_price_gte_zero",
            ),
        ]

    def clean(self):
        if self.available_qty is not None and self.available_qty < 0:
            raise ValidationError({"available_qty": "available_qty cannot be negative"})

        if not self.expiry_date:
            raise ValidationError({"expiry_date": "expiry_date is required"})

        if not (self.batch_code or "").strip():
            raise ValidationError({"batch_code": "batch_code is required"})

    def save(self, *args, **kwargs):
        # available_qty, version and is_active move only through ledger and approval UPDATEs
        if not self._state.adding and kwargs.get("update_fields") is None:
            kwargs["update_fields"] = [
                f.name
                for f in self._meta.concrete_fields
                if not f.primary_key and f.name not in ("available_qty", "version", "is_active")
            ]
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Stock batches are retained for audit and cannot be deleted")

    @property
    def is_expired(self) -> bool:
        return self.expiry_date < timezone.localdate()

    @property
    def stock_value(self) -> Decimal:
        return Decimal(self.purchase_price or 0) * Decimal(int(self.available_qty or 0))

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | Batch {self.batch_code}"
