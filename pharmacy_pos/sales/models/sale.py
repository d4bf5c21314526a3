# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Represents a completed POS transaction.

    GUARANTEES:
    - Financial fields are immutable once persisted
    - Stock is mutated ONLY via the stock ledger (one delta per line)
    - The only status change allowed is completed -> returned
      (see sales.services.sale_lifecycle)
    """

    STATUS_COMPLETED = "completed"
    STATUS_RETURNED = "returned"

    STATUS_CHOICES = [
        (STATUS_COMPLETED, "Completed"),
        (STATUS_RETURNED, "Returned"),
    ]

    class PaymentMethod(models.TextChoices):
        CASH = "cash", "Cash"
        CARD = "card", "Card"
        TRANSFER = "transfer", "Transfer"
        MIXED = "mixed", "Mixed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice_no = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated invoice / receipt number",
    )

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
        help_text="Cashier / staff who processed the sale",
    )

    payment_method = models.CharField(
        max_length=16,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH,
    )

    # Tendered amounts
    cash_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    card_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    transfer_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    change_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    subtotal_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    discount_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    tax_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_COMPLETED,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="sale_created_idx"),
            models.Index(fields=["status"], name="sale_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(total_amount__gte=0),
                name="chk_sale_total_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(change_amount__gte=0),
                name="chk_sale_change_gte_zero",
            ),
        ]

    _IMMUTABLE_FIELDS = (
        "invoice_no",
        "user_id",
        "payment_method",
        "cash_amount",
        "card_amount",
        "transfer_amount",
        "change_amount",
        "subtotal_amount",
        "discount_amount",
        "tax_amount",
        "total_amount",
    )

    def _validate_immutable(self, previous: "Sale"):
        if self.status != previous.status and not (
            previous.status == self.STATUS_COMPLETED
            and self.status == self.STATUS_RETURNED
        ):
            raise ValueError(
                f"Status change {previous.status} -> {self.status} is not allowed."
            )

        for field in self._IMMUTABLE_FIELDS:
            if getattr(self, field) != getattr(previous, field):
                raise ValueError(f"Sale field '{field}' cannot be changed.")

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        if not self.invoice_no:
            prefix = timezone.now().strftime("INV%Y%m%d")
            self.invoice_no = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.invoice_no} | {self.total_amount}"
