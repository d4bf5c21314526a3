# products/services/invariants.py

"""
STOCK INVARIANT RECONCILIATION (READ-ONLY)

Checks, per product:
- stock_total == sum(available_qty) over ACTIVE batches
- InventoryAggregate.total_stock == stock_total (row must exist once stock moved)
- no batch holds negative stock
- no inactive batch holds stock

Never repairs anything; a breach means a write bypassed the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.db.models import Q, Sum

from products.models import InventoryAggregate, Product, StockBatch


@dataclass(frozen=True)
class InvariantBreach:
    product_id: str
    kind: str
    expected: int
    actual: int

    def __str__(self):
        return f"{self.product_id} {self.kind}: expected {self.expected}, found {self.actual}"


def verify_stock_invariants(product_ids=None) -> list[InvariantBreach]:
    products = Product.objects.all().order_by("pk")
    if product_ids is not None:
        products = products.filter(pk__in=list(product_ids))

    active_sums = dict(
        StockBatch.objects.filter(is_active=True)
        .values_list("product_id")
        .annotate(total=Sum("available_qty"))
        .values_list("product_id", "total")
    )
    aggregates = dict(InventoryAggregate.objects.values_list("product_id", "total_stock"))

    breaches: list[InvariantBreach] = []

    for product in products.iterator():
        pid = str(product.pk)
        batch_sum = int(active_sums.get(product.pk) or 0)

        if product.stock_total != batch_sum:
            breaches.append(
                InvariantBreach(pid, "stock_total_vs_batches", batch_sum, product.stock_total)
            )

        aggregate_total = aggregates.get(product.pk)
        if aggregate_total is None:
            if product.stock_total != 0:
                breaches.append(
                    InvariantBreach(pid, "aggregate_missing", product.stock_total, 0)
                )
        elif aggregate_total != product.stock_total:
            breaches.append(
                InvariantBreach(pid, "aggregate_vs_stock_total", product.stock_total, aggregate_total)
            )

    stray = StockBatch.objects.filter(
        Q(available_qty__lt=0) | Q(is_active=False, available_qty__gt=0)
    )
    if product_ids is not None:
        stray = stray.filter(product_id__in=list(product_ids))

    for batch in stray.order_by("pk"):
        kind = "negative_batch" if batch.available_qty < 0 else "inactive_batch_with_stock"
        breaches.append(InvariantBreach(str(batch.product_id), kind, 0, batch.available_qty))

    return breaches
