"""
======================================================
PATH: products/views/stock_batch.py
======================================================
STOCK BATCH VIEWSET (READ-ONLY)

- retrieve: one batch with its derived expiry bucket
- No create/update/delete: batches are born in receiving and
  their quantities move only through the stock ledger.
"""

from __future__ import annotations

from rest_framework import mixins, viewsets
from rest_framework.permissions import IsAuthenticated

from products.models import StockBatch
from products.serializers.stock_batch import StockBatchSerializer


class StockBatchViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = StockBatchSerializer
    permission_classes = [IsAuthenticated]
    queryset = StockBatch.objects.select_related("product")
