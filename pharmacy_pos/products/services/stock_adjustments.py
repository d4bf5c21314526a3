# products/services/stock_adjustments.py

"""
STOCK ADJUSTMENTS SERVICE

Purpose:
- Set one or more batches to an authoritative physical count.
- Record before / after / delta per line.
- Propagate each delta through the stock ledger (reason=ADJUSTMENT).

Rules:
- at least one line; new_quantity is an integer >= 0
- the same batch may appear only once
- batches are locked in primary-key order before anything is read
- missing batch -> NotFoundError, inactive batch -> InvalidStateError
- all lines commit or none do
"""

from __future__ import annotations

import logging

from django.db import transaction

from products.models import StockAdjustment, StockAdjustmentLine, StockMovement
from products.services.exceptions import (
    InvalidStateError,
    NotFoundError,
    ValidationError,
    storage_guard,
)
from products.services.normalize import as_mapping, to_int, to_uuid
from products.services.stock_ledger import apply_delta, lock_batches, lock_products

logger = logging.getLogger(__name__)


def _normalize_lines(lines) -> list[tuple[str, int]]:
    if not lines:
        raise ValidationError("At least one adjustment line is required")

    normalized = []
    seen = set()

    for index, line in enumerate(lines):
        where = {"line": index}
        line = as_mapping(line, details=where)
        batch_id = to_uuid(line.get("batch_id"), field="batch_id", details=where)
        new_quantity = to_int(line.get("new_quantity"), field="new_quantity", details=where)

        if new_quantity < 0:
            raise ValidationError(
                "new_quantity cannot be negative",
                details={**where, "field": "new_quantity"},
            )

        if batch_id in seen:
            raise ValidationError(
                "A batch may only appear once per adjustment",
                details={**where, "batch_id": batch_id},
            )
        seen.add(batch_id)

        normalized.append((batch_id, new_quantity))

    return normalized


@storage_guard
@transaction.atomic
def create_adjustment(*, reason: str, lines, notes: str = "", user=None) -> StockAdjustment:
    """
    Apply a physical recount.

    lines: iterable of {"batch_id", "new_quantity"}
    """
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("reason is required", details={"field": "reason"})

    normalized = _normalize_lines(lines)

    batches = lock_batches(batch_id for batch_id, _ in normalized)

    for index, (batch_id, _) in enumerate(normalized):
        batch = batches.get(batch_id)
        if batch is None:
            raise NotFoundError("Batch not found", details={"line": index, "batch_id": batch_id})
        if not batch.is_active:
            raise InvalidStateError(
                "Cannot adjust an inactive batch",
                details={"line": index, "batch_id": batch_id},
            )

    lock_products(b.product_id for b in batches.values())

    adjustment = StockAdjustment.objects.create(
        user=user if getattr(user, "is_authenticated", False) else None,
        reason=reason,
        notes=notes or "",
    )

    net_delta = 0
    for batch_id, new_quantity in normalized:
        batch = batches[batch_id]
        before = int(batch.available_qty)
        delta = new_quantity - before
        net_delta += delta

        StockAdjustmentLine.objects.create(
            adjustment=adjustment,
            batch=batch,
            quantity_before=before,
            quantity_after=new_quantity,
            quantity_delta=delta,
        )

        apply_delta(
            product_id=batch.product_id,
            batch_id=batch.pk,
            delta=delta,
            reason=StockMovement.Reason.ADJUSTMENT,
            reference=adjustment,
            user=user,
        )

    logger.info(
        "Stock adjustment committed",
        extra={
            "adjustment_id": str(adjustment.pk),
            "lines": len(normalized),
            "net_delta": net_delta,
        },
    )

    return adjustment
