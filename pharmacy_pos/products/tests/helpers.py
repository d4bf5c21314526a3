# products/tests/helpers.py

"""
Shared builders for stock tests.

Stock is always put on a batch through the ledger (RECEIPT), so the
product counter, aggregate row and movement history stay consistent.
"""

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from products.models import Product, StockBatch, StockMovement
from products.services.stock_ledger import apply_delta

User = get_user_model()


def make_user(username="stock_admin"):
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="password123",
    )


def make_product(sku="PCM-500", name="Paracetamol 500mg", sale_price="500.00", **extra):
    return Product.objects.create(
        sku=sku,
        name=name,
        sale_price=Decimal(sale_price),
        **extra,
    )


def make_batch(product, *, code="LOT-001", qty=0, expiry=None, purchase_price="250.00", active=True):
    batch = StockBatch.objects.create(
        product=product,
        batch_code=code,
        expiry_date=expiry or (timezone.localdate() + timedelta(days=730)),
        purchase_price=Decimal(purchase_price),
        is_active=active,
    )

    if qty:
        apply_delta(
            product_id=product.pk,
            batch_id=batch.pk,
            delta=qty,
            reason=StockMovement.Reason.RECEIPT,
        )
        batch.refresh_from_db()
        product.refresh_from_db()

    return batch
