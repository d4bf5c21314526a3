"""
======================================================
PATH: sales/migrations/0001_initial.py
======================================================
MIGRATION: SALES + RETURNS SCHEMA

Creates:
- Sale (immutable financial snapshot)
- SaleLine (bound to a batch, tracks quantity_returned)
- SaleReturn + SaleReturnLine
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "invoice_no",
                    models.CharField(
                        blank=True,
                        help_text="System-generated invoice / receipt number",
                        max_length=64,
                        unique=True,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("cash", "Cash"),
                            ("card", "Card"),
                            ("transfer", "Transfer"),
                            ("mixed", "Mixed"),
                        ],
                        default="cash",
                        max_length=16,
                    ),
                ),
                ("cash_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("card_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("transfer_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("change_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("subtotal_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("discount_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("tax_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "status",
                    models.CharField(
                        choices=[("completed", "Completed"), ("returned", "Returned")],
                        default="completed",
                        max_length=32,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        help_text="Cashier / staff who processed the sale",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["created_at"], name="sale_created_idx"),
                    models.Index(fields=["status"], name="sale_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(total_amount__gte=0), name="chk_sale_total_gte_zero"),
                    models.CheckConstraint(condition=models.Q(change_amount__gte=0), name="chk_sale_change_gte_zero"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleLine",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("line_no", models.PositiveIntegerField()),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("discount_pct", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("tax_pct", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("subtotal_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("discount_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("tax_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("line_total", models.DecimalField(decimal_places=2, max_digits=12)),
                ("quantity_returned", models.PositiveIntegerField(default=0)),
                (
                    "batch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_lines",
                        to="products.stockbatch",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_lines",
                        to="products.product",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "ordering": ["sale", "line_no"],
                "constraints": [
                    models.UniqueConstraint(fields=("sale", "line_no"), name="unique_line_no_per_sale"),
                    models.CheckConstraint(condition=models.Q(quantity__gt=0), name="chk_saleline_quantity_gt_zero"),
                    models.CheckConstraint(
                        condition=models.Q(quantity_returned__lte=models.F("quantity")),
                        name="chk_saleline_returned_lte_quantity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleReturn",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "return_type",
                    models.CharField(choices=[("partial", "Partial"), ("total", "Total")], max_length=16),
                ),
                ("reason", models.CharField(max_length=255)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "refund_method",
                    models.CharField(
                        choices=[
                            ("cash", "Cash"),
                            ("card", "Card"),
                            ("transfer", "Transfer"),
                            ("credit", "Store credit"),
                        ],
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(choices=[("completed", "Completed")], default="completed", max_length=16),
                ),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="returns",
                        to="sales.sale",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sale_returns",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["sale", "created_at"], name="salereturn_sale_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleReturnLine",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("refund_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("reason", models.CharField(blank=True, default="", max_length=255)),
                (
                    "batch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="return_lines",
                        to="products.stockbatch",
                    ),
                ),
                (
                    "sale_line",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="return_lines",
                        to="sales.saleline",
                    ),
                ),
                (
                    "sale_return",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="sales.salereturn",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(quantity__gt=0), name="chk_returnline_quantity_gt_zero"),
                ],
            },
        ),
    ]
