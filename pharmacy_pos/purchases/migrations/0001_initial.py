"""
======================================================
PATH: purchases/migrations/0001_initial.py
======================================================
MIGRATION: GOODS RECEIVING SCHEMA

Creates:
- Supplier
- ReceivingRecord (DRAFT -> APPROVED)
- ReceivingLine (owns one StockBatch)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
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
            name="Supplier",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200)),
                ("contact", models.CharField(blank=True, default="", max_length=200)),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("address", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="supplier_name_idx"),
                    models.Index(fields=["is_active"], name="supplier_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReceivingRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("invoice_number", models.CharField(max_length=64)),
                ("received_on", models.DateField(default=django.utils.timezone.localdate)),
                ("city", models.CharField(blank=True, default="", max_length=120)),
                ("responsible", models.CharField(blank=True, default="", max_length=200)),
                ("record_type", models.CharField(blank=True, default="", max_length=60)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[("DRAFT", "Draft"), ("APPROVED", "Approved")],
                        default="DRAFT",
                        max_length=20,
                    ),
                ),
                ("loaded_to_inventory", models.BooleanField(default=False)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="receiving_records_approved",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="receiving_records_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "supplier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="receiving_records",
                        to="purchases.supplier",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="receiving_status_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("supplier", "invoice_number"),
                        name="uniq_supplier_receiving_invoice",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReceivingLine",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("line_no", models.PositiveIntegerField()),
                ("quantity_received", models.PositiveIntegerField()),
                ("purchase_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "batch",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="receiving_line",
                        to="products.stockbatch",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="receiving_lines",
                        to="products.product",
                    ),
                ),
                (
                    "record",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="purchases.receivingrecord",
                    ),
                ),
            ],
            options={
                "ordering": ["record", "line_no"],
                "constraints": [
                    models.UniqueConstraint(fields=("record", "line_no"), name="uniq_receiving_line_no"),
                    models.CheckConstraint(
                        condition=models.Q(quantity_received__gt=0),
                        name="receiving_line_quantity_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(purchase_price__gte=Decimal("0.00")),
                        name="receiving_line_price_nonnegative",
                    ),
                ],
            },
        ),
    ]
