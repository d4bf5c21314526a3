# sales/services/return_processor.py

"""
RETURN TRANSACTION PROCESSOR (APPLICATION SERVICE)

Purpose:
- Accept goods back against a completed sale (partial or total).
- Credit each returned line's ORIGINAL batch through the stock ledger
  (reason=RETURN) and grow SaleLine.quantity_returned.
- Move the sale to "returned" once every unit has come back.

Hard rules:
- Sale must exist and be "completed".
- Every referenced sale line must belong to that sale.
- Lines repeating the same sale line are summed.
- Requested quantity <= quantity - quantity_returned, per sale line;
  one violation aborts the whole return (OverReturnError).
- "total" with no lines returns everything remaining; with lines it must
  cover everything remaining. "partial" requires lines.
- Refund per line = quantity * sale_line.unit_price.

Locking order: sale -> its lines -> batches (pk order) -> products (pk order).
"""

from __future__ import annotations

import logging
from collections import OrderedDict

from django.db import transaction
from django.db.models import F

from products.models import StockMovement
from products.services.exceptions import (
    NotFoundError,
    OverReturnError,
    StockLedgerError,
    ValidationError,
    storage_guard,
)
from products.services.normalize import ZERO, as_mapping, money, to_int, to_uuid
from products.services.stock_ledger import apply_delta, lock_batches, lock_products
from sales.models import Sale, SaleLine, SaleReturn, SaleReturnLine
from sales.services.sale_lifecycle import validate_returnable, validate_transition

logger = logging.getLogger(__name__)


def _choice(value, *, field: str, allowed) -> str:
    v = str(value or "").strip().lower()
    if v not in allowed:
        raise ValidationError(f"Invalid {field}: {v or '(empty)'}", details={"field": field})
    return v


def _requested_quantities(lines, *, sale_lines: dict) -> "OrderedDict[int, dict]":
    """
    Merge raw lines into {sale_line_id: {"quantity", "reason", "line"}}.
    """
    merged: "OrderedDict[int, dict]" = OrderedDict()

    for index, raw in enumerate(lines):
        where = {"line": index}
        raw = as_mapping(raw, details=where)

        sale_line_id = to_int(raw.get("sale_line_id"), field="sale_line_id", details=where)
        if sale_line_id not in sale_lines:
            raise NotFoundError(
                "Sale line not found on this sale",
                details={**where, "sale_line_id": sale_line_id},
            )

        quantity = to_int(raw.get("quantity"), field="quantity", details=where)
        if quantity <= 0:
            raise ValidationError(
                "quantity must be a positive integer",
                details={**where, "field": "quantity"},
            )

        entry = merged.setdefault(sale_line_id, {"quantity": 0, "reason": "", "line": index})
        entry["quantity"] += quantity
        if not entry["reason"]:
            entry["reason"] = str(raw.get("reason") or "").strip()

    return merged


@storage_guard
@transaction.atomic
def create_return(
    *,
    sale_id,
    lines=None,
    refund_method,
    return_type,
    reason: str,
    notes: str = "",
    user=None,
) -> SaleReturn:
    """
    lines: iterable of {"sale_line_id", "quantity", "reason"=""}
    """
    sale_id = to_uuid(sale_id, field="sale_id")
    refund_method = _choice(refund_method, field="refund_method", allowed=SaleReturn.RefundMethod.values)
    return_type = _choice(return_type, field="return_type", allowed=SaleReturn.ReturnType.values)

    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("reason is required", details={"field": "reason"})

    lines = list(lines or [])

    try:
        sale = Sale.objects.select_for_update().filter(pk=sale_id).first()
        if sale is None:
            raise NotFoundError("Sale not found", details={"sale_id": sale_id})

        validate_returnable(sale=sale)

        sale_lines = {
            sl.pk: sl
            for sl in SaleLine.objects.select_for_update().filter(sale=sale).order_by("pk")
        }

        if return_type == SaleReturn.ReturnType.PARTIAL and not lines:
            raise ValidationError("A partial return requires at least one line")

        if lines:
            requested = _requested_quantities(lines, sale_lines=sale_lines)
        else:
            requested = OrderedDict(
                (sl.pk, {"quantity": sl.remaining_quantity, "reason": "", "line": None})
                for sl in sorted(sale_lines.values(), key=lambda sl: sl.line_no)
                if sl.remaining_quantity > 0
            )
            if not requested:
                raise ValidationError("Nothing left to return on this sale")

        for sale_line_id, entry in requested.items():
            sl = sale_lines[sale_line_id]
            if entry["quantity"] > sl.remaining_quantity:
                raise OverReturnError(
                    f"Cannot return {entry['quantity']} of line {sl.line_no}. "
                    f"Remaining: {sl.remaining_quantity}",
                    details={
                        "line": entry["line"],
                        "sale_line_id": sale_line_id,
                        "requested": entry["quantity"],
                        "remaining": sl.remaining_quantity,
                    },
                )

        if return_type == SaleReturn.ReturnType.TOTAL:
            for sl in sale_lines.values():
                returned_now = requested.get(sl.pk, {}).get("quantity", 0)
                if returned_now != sl.remaining_quantity:
                    raise ValidationError(
                        "A total return must cover every remaining unit of the sale",
                        details={"sale_line_id": sl.pk, "remaining": sl.remaining_quantity},
                    )
    except StockLedgerError as exc:
        logger.warning(
            "Return rejected: %s",
            exc.message,
            extra={"code": exc.code, "details": exc.details, "sale_id": sale_id},
        )
        raise

    touched = [sale_lines[pk] for pk in requested]
    lock_batches(str(sl.batch_id) for sl in touched)
    lock_products(str(sl.product_id) for sl in touched)

    sale_return = SaleReturn.objects.create(
        sale=sale,
        user=user if getattr(user, "is_authenticated", False) else None,
        return_type=return_type,
        reason=reason,
        notes=notes or "",
        refund_method=refund_method,
        status=SaleReturn.STATUS_COMPLETED,
    )

    total = ZERO
    for sale_line_id, entry in requested.items():
        sl = sale_lines[sale_line_id]
        qty = entry["quantity"]
        refund = money(sl.unit_price * qty)
        total += refund

        SaleReturnLine.objects.create(
            sale_return=sale_return,
            sale_line=sl,
            batch_id=sl.batch_id,
            quantity=qty,
            unit_price=sl.unit_price,
            refund_amount=refund,
            reason=entry["reason"],
        )

        updated = SaleLine.objects.filter(
            pk=sl.pk,
            quantity_returned__lte=F("quantity") - qty,
        ).update(quantity_returned=F("quantity_returned") + qty)
        if updated != 1:
            raise OverReturnError(
                "Sale line changed while returning",
                details={"sale_line_id": sl.pk},
            )

        apply_delta(
            product_id=sl.product_id,
            batch_id=sl.batch_id,
            delta=qty,
            reason=StockMovement.Reason.RETURN,
            reference=sale_return,
            user=user,
        )

    sale_return.total_amount = money(total)
    sale_return.save(update_fields=["total_amount"])

    fully_returned = not SaleLine.objects.filter(
        sale=sale, quantity_returned__lt=F("quantity")
    ).exists()
    if fully_returned:
        validate_transition(sale=sale, target_status=Sale.STATUS_RETURNED)
        sale.status = Sale.STATUS_RETURNED
        sale.save(update_fields=["status", "updated_at"])

    logger.info(
        "Return committed",
        extra={
            "sale_id": str(sale.pk),
            "return_id": str(sale_return.pk),
            "return_type": return_type,
            "total_amount": str(sale_return.total_amount),
            "sale_status": sale.status,
        },
    )

    return sale_return
