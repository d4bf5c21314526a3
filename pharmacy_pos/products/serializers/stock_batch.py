# products/serializers/stock_batch.py
"""
======================================================
PATH: products/serializers/stock_batch.py
======================================================
STOCK BATCH SERIALIZER (READ-ONLY)

- Quantities are ledger-managed; nothing here is writable.
- expiry_bucket / days_until_expiry are derived on every read, never stored.
"""

from __future__ import annotations

from rest_framework import serializers

from products.models import StockBatch
from products.services.expiry import classify_expiry, days_until_expiry


class StockBatchSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    expiry_bucket = serializers.SerializerMethodField()
    days_until_expiry = serializers.SerializerMethodField()

    class Meta:
        model = StockBatch
        fields = [
            "id",
            "product",
            "product_name",
            "product_sku",
            "batch_code",
            "expiry_date",
            "expiry_bucket",
            "days_until_expiry",
            "available_qty",
            "purchase_price",
            "is_active",
            "version",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_expiry_bucket(self, obj) -> str:
        return str(classify_expiry(obj.expiry_date))

    def get_days_until_expiry(self, obj) -> int:
        return days_until_expiry(obj.expiry_date)
