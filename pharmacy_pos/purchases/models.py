# purchases/models.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from products.models import Product, StockBatch

User = settings.AUTH_USER_MODEL


class Supplier(models.Model):
    """
    Supplier master (read-mostly metadata).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200)
    contact = models.CharField(max_length=200, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="supplier_name_idx"),
            models.Index(fields=["is_active"], name="supplier_active_idx"),
        ]

    def __str__(self):
        return self.name


class ReceivingRecord(models.Model):
    """
    Goods receiving record (delivery note / acta de recepción).

    State machine:
        DRAFT -> APPROVED (terminal)

    - DRAFT: lines exist, their batches exist INACTIVE with zero stock
    - APPROVED: batches active, quantities credited via the stock ledger
    """

    STATUS_DRAFT = "DRAFT"
    STATUS_APPROVED = "APPROVED"

    STATUSES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_APPROVED, "Approved"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="receiving_records",
    )

    invoice_number = models.CharField(max_length=64)
    received_on = models.DateField(default=timezone.localdate)

    city = models.CharField(max_length=120, blank=True, default="")
    responsible = models.CharField(max_length=200, blank=True, default="")
    record_type = models.CharField(max_length=60, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_DRAFT)
    loaded_to_inventory = models.BooleanField(default=False)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="receiving_records_created",
    )
    approved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="receiving_records_approved",
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["supplier", "invoice_number"],
                name="uniq_supplier_receiving_invoice",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "created_at"], name="receiving_status_created_idx"),
        ]

    def clean(self):
        if not (self.invoice_number or "").strip():
            raise ValidationError({"invoice_number": "invoice_number is required"})

        if self.status == self.STATUS_APPROVED and not self.approved_at:
            raise ValidationError(
                {"approved_at": "approved_at is required when status is APPROVED"}
            )

        if self.status == self.STATUS_DRAFT and self.loaded_to_inventory:
            raise ValidationError(
                {"loaded_to_inventory": "A draft cannot be loaded to inventory"}
            )

    def save(self, *args, **kwargs):
        if self.invoice_number is not None:
            self.invoice_number = self.invoice_number.strip()

        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.invoice_number} ({self.supplier.name})"


class ReceivingLine(models.Model):
    """
    One received lot. Owns exactly one StockBatch, created inactive with the draft.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    record = models.ForeignKey(
        ReceivingRecord,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    line_no = models.PositiveIntegerField()
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="receiving_lines",
    )
    batch = models.OneToOneField(
        StockBatch,
        on_delete=models.PROTECT,
        related_name="receiving_line",
    )

    quantity_received = models.PositiveIntegerField()
    purchase_price = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["record", "line_no"]
        constraints = [
            models.UniqueConstraint(
                fields=["record", "line_no"],
                name="uniq_receiving_line_no",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity_received__gt=0),
                name="receiving_line_quantity_gt_zero",
            ),
            models.CheckConstraint(
                condition=models.Q(purchase_price__gte=Decimal("0.00")),
                name="receiving_line_price_nonnegative",
            ),
        ]

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.purchase_price or 0) * Decimal(int(self.quantity_received or 0))

    def __str__(self):
        return f"{self.product} x {self.quantity_received}"
