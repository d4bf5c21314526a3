# products/services/stock_ledger.py

"""
STOCK LEDGER (SINGLE WRITER)

Purpose:
- The ONLY code allowed to change stock quantities.
- Keeps three representations in lock-step inside one transaction:
    1) StockBatch.available_qty       (per lot)
    2) Product.stock_total            (per product, sum of active lots)
    3) InventoryAggregate.total_stock (per product aggregate row)
- Appends one immutable StockMovement per non-zero delta.

Rules:
- batch must belong to product_id and be active
- resulting available_qty can never be negative:
    * processors check availability first (typed business errors)
    * the batch UPDATE is guarded (available_qty >= -delta) and bumps version,
      so a lost race is caught here too
- delta == 0 is a no-op (no writes, no movement)

Locking:
- Processors lock every batch they touch (pk order) and then every product
  they touch (pk order) via lock_batches() / lock_products() BEFORE checking
  anything, then call apply_delta() per line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from products.models import InventoryAggregate, Product, StockBatch, StockMovement
from products.services.exceptions import (
    InvalidStateError,
    NegativeStockInvariantViolation,
    NotFoundError,
    ValidationError,
    storage_guard,
)
from products.services.normalize import to_int, to_uuid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerResult:
    batch: StockBatch
    product: Product
    aggregate: InventoryAggregate | None
    movement: StockMovement | None
    delta: int


# ============================================================
# LOCKING HELPERS
# ============================================================

def lock_batches(batch_ids) -> dict:
    """
    select_for_update() every batch in primary-key order.

    Returns {pk: StockBatch}. Missing ids are simply absent; callers
    decide which error to raise.
    """
    ids = sorted({str(b) for b in batch_ids})
    rows = StockBatch.objects.select_for_update().filter(pk__in=ids).order_by("pk")
    return {str(b.pk): b for b in rows}


def lock_products(product_ids) -> dict:
    ids = sorted({str(p) for p in product_ids})
    rows = Product.objects.select_for_update().filter(pk__in=ids).order_by("pk")
    return {str(p.pk): p for p in rows}


def _reference_fields(reference) -> tuple[str, str]:
    if reference is None:
        return "", ""
    return reference._meta.model_name, str(reference.pk)


# ============================================================
# LEDGER PRIMITIVE
# ============================================================

@storage_guard
@transaction.atomic
def apply_delta(
    *,
    product_id,
    batch_id,
    delta,
    reason: str,
    reference=None,
    user=None,
) -> LedgerResult:
    """
    Apply a signed quantity delta to one batch and propagate it.

    Runs inside the caller's transaction (nested savepoint) or its own.
    """
    delta = to_int(delta, field="delta")
    product_id = to_uuid(product_id, field="product_id")
    batch_id = to_uuid(batch_id, field="batch_id")

    if reason not in StockMovement.Reason.values:
        raise ValidationError(f"Unknown ledger reason: {reason}", details={"reason": reason})

    batch = StockBatch.objects.select_for_update().filter(pk=batch_id).first()
    if batch is None:
        raise NotFoundError("Batch not found", details={"batch_id": batch_id})

    if str(batch.product_id) != product_id:
        raise ValidationError(
            "Batch does not belong to product",
            details={"batch_id": str(batch.pk), "product_id": product_id},
        )

    if not batch.is_active:
        raise InvalidStateError(
            "Batch is not active",
            details={"batch_id": str(batch.pk)},
        )

    if delta == 0:
        return LedgerResult(
            batch=batch,
            product=Product.objects.get(pk=batch.product_id),
            aggregate=InventoryAggregate.objects.filter(product_id=batch.product_id).first(),
            movement=None,
            delta=0,
        )

    context = {
        "batch_id": str(batch.pk),
        "product_id": str(batch.product_id),
        "delta": delta,
        "available_qty": batch.available_qty,
        "reason": reason,
    }

    if batch.available_qty + delta < 0:
        logger.critical("Ledger write would make stock negative", extra=context)
        raise NegativeStockInvariantViolation(
            "Stock cannot go negative",
            details={k: context[k] for k in ("batch_id", "delta", "available_qty")},
        )

    # Guarded compare-and-swap write
    updated = StockBatch.objects.filter(
        pk=batch.pk,
        is_active=True,
        available_qty__gte=-delta,
    ).update(
        available_qty=F("available_qty") + delta,
        version=F("version") + 1,
        updated_at=timezone.now(),
    )
    if updated != 1:
        logger.critical("Guarded batch update rejected", extra=context)
        raise NegativeStockInvariantViolation(
            "Stock cannot go negative",
            details={k: context[k] for k in ("batch_id", "delta", "available_qty")},
        )

    Product.objects.filter(pk=batch.product_id).update(
        stock_total=F("stock_total") + delta,
        updated_at=timezone.now(),
    )

    batch.refresh_from_db()
    product = Product.objects.get(pk=batch.product_id)

    aggregate, _ = InventoryAggregate.objects.update_or_create(
        product=product,
        defaults={"total_stock": product.stock_total},
    )

    reference_type, reference_id = _reference_fields(reference)

    movement = StockMovement.objects.create(
        product=product,
        batch=batch,
        reason=reason,
        quantity_delta=delta,
        balance_after=batch.available_qty,
        reference_type=reference_type,
        reference_id=reference_id,
        performed_by=user if getattr(user, "is_authenticated", False) else None,
    )

    logger.debug(
        "Ledger delta applied",
        extra={
            **context,
            "available_qty": batch.available_qty,
            "stock_total": product.stock_total,
            "reference": f"{reference_type}:{reference_id}",
        },
    )

    return LedgerResult(
        batch=batch,
        product=product,
        aggregate=aggregate,
        movement=movement,
        delta=delta,
    )
