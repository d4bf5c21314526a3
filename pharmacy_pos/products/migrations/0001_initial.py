"""
======================================================
PATH: products/migrations/0001_initial.py
======================================================
MIGRATION: STOCK LEDGER SCHEMA

Creates:
- Product (ledger-owned stock_total)
- StockBatch (available_qty >= 0 check, unique batch_code per product)
- InventoryAggregate (one row per product)
- StockMovement (append-only history)
- StockAdjustment + StockAdjustmentLine
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
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sku", models.CharField(db_index=True, max_length=128, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("barcode", models.CharField(blank=True, db_index=True, default="", max_length=64)),
                ("sale_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("min_stock", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("stock_total", models.IntegerField(default=0, editable=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(stock_total__gte=0),
                        name="chk_product_stock_total_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockBatch",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("batch_code", models.CharField(help_text="Manufacturer / supplier lot code", max_length=128)),
                ("expiry_date", models.DateField()),
                ("available_qty", models.IntegerField(default=0, help_text="Remaining quantity (ledger-managed only)")),
                ("purchase_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("is_active", models.BooleanField(default=False)),
                ("version", models.PositiveIntegerField(default=0, editable=False)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_batches",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["expiry_date", "created_at"],
                "indexes": [
                    models.Index(fields=["product", "is_active", "expiry_date"], name="batch_prod_active_expiry_idx"),
                    models.Index(fields=["expiry_date"], name="batch_expiry_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("product", "batch_code"), name="unique_batch_code_per_product"),
                    models.CheckConstraint(
                        condition=models.Q(available_qty__gte=0),
                        name="chk_stockbatch_available_qty_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(purchase_price__gte=0),
                        name="chk_stockbatch_purchase_price_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="InventoryAggregate",
            fields=[
                (
                    "product",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        primary_key=True,
                        related_name="inventory",
                        serialize=False,
                        to="products.product",
                    ),
                ),
                ("total_stock", models.IntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(total_stock__gte=0),
                        name="chk_inventory_total_stock_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("RECEIPT", "Stock Receipt"),
                            ("SALE", "Sale"),
                            ("RETURN", "Sale Return"),
                            ("ADJUSTMENT", "Manual Adjustment"),
                        ],
                        max_length=20,
                    ),
                ),
                ("quantity_delta", models.IntegerField()),
                ("balance_after", models.IntegerField()),
                ("reference_type", models.CharField(blank=True, default="", max_length=40)),
                ("reference_id", models.CharField(blank=True, default="", max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "batch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="products.stockbatch",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["product", "created_at"], name="movement_product_created_idx"),
                    models.Index(fields=["batch", "created_at"], name="movement_batch_created_idx"),
                    models.Index(fields=["reference_type", "reference_id"], name="movement_reference_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockAdjustment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("reason", models.CharField(max_length=255)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_adjustments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="StockAdjustmentLine",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("quantity_before", models.PositiveIntegerField()),
                ("quantity_after", models.PositiveIntegerField()),
                ("quantity_delta", models.IntegerField()),
                (
                    "adjustment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="products.stockadjustment",
                    ),
                ),
                (
                    "batch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="adjustment_lines",
                        to="products.stockbatch",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(fields=("adjustment", "batch"), name="unique_batch_per_adjustment"),
                    models.CheckConstraint(
                        condition=models.Q(quantity_delta=models.F("quantity_after") - models.F("quantity_before")),
                        name="chk_adjustmentline_delta_consistent",
                    ),
                ],
            },
        ),
    ]
