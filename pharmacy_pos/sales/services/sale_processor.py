# sales/services/sale_processor.py

"""
SALE TRANSACTION PROCESSOR (APPLICATION SERVICE)

Purpose:
- Turn validated sale lines into a completed Sale (atomic, auditable).
- Debit each line's batch through the stock ledger (reason=SALE).

Hard rules:
- Quantities are positive integer units.
- Money values are computed server-side (sales.services.pricing).
- Every check runs BEFORE any write; any failure aborts the whole sale.
- Batches are locked in primary-key order, then products, before checking stock.
- Quantities of lines sharing a batch are summed before the availability check.
- Expired batches are not sellable.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from products.models import StockMovement
from products.services.exceptions import (
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
    storage_guard,
)
from products.services.normalize import ZERO, as_mapping, money, to_decimal, to_int, to_percent, to_uuid
from products.services.stock_ledger import apply_delta, lock_batches, lock_products
from sales.models import Sale, SaleLine
from sales.services.pricing import compute_change, price_line, sum_totals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Line:
    index: int
    product_id: str
    batch_id: str
    quantity: int
    unit_price: Decimal
    discount_pct: Decimal
    tax_pct: Decimal


def _default_tax_pct() -> Decimal:
    return Decimal(str(getattr(settings, "SALES_DEFAULT_TAX_PCT", "19.00")))


def _normalize_payment_method(method) -> str:
    m = str(method or "").strip().lower()
    if m not in Sale.PaymentMethod.values:
        raise ValidationError(
            f"Invalid payment method: {m or '(empty)'}",
            details={"field": "payment_method"},
        )
    return m


def _tendered(value, *, field: str) -> Decimal:
    if value is None or value == "":
        return ZERO
    amount = to_decimal(value, field=field)
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative", details={"field": field})
    return money(amount)


def _normalize_lines(lines) -> list[_Line]:
    if not lines:
        raise ValidationError("A sale requires at least one line")

    out = []
    for index, raw in enumerate(lines):
        where = {"line": index}
        raw = as_mapping(raw, details=where)

        quantity = to_int(raw.get("quantity"), field="quantity", details=where)
        if quantity <= 0:
            raise ValidationError(
                "quantity must be a positive integer",
                details={**where, "field": "quantity"},
            )

        unit_price = to_decimal(raw.get("unit_price"), field="unit_price", details=where)
        if unit_price < 0:
            raise ValidationError(
                "unit_price cannot be negative",
                details={**where, "field": "unit_price"},
            )

        discount_raw = raw.get("discount_pct")
        tax_raw = raw.get("tax_pct")

        out.append(
            _Line(
                index=index,
                product_id=to_uuid(raw.get("product_id"), field="product_id", details=where),
                batch_id=to_uuid(raw.get("batch_id"), field="batch_id", details=where),
                quantity=quantity,
                unit_price=money(unit_price),
                discount_pct=(
                    ZERO
                    if discount_raw in (None, "")
                    else to_percent(discount_raw, field="discount_pct", details=where)
                ),
                tax_pct=(
                    _default_tax_pct()
                    if tax_raw in (None, "")
                    else to_percent(tax_raw, field="tax_pct", details=where)
                ),
            )
        )

    return out


def _check_lines(lines: list[_Line], *, batches: dict, products: dict) -> None:
    today = timezone.localdate()
    requested = defaultdict(int)
    first_index = {}

    for line in lines:
        where = {"line": line.index}

        product = products.get(line.product_id)
        if product is None or not product.is_active:
            raise NotFoundError(
                "Product not found or inactive",
                details={**where, "product_id": line.product_id},
            )

        batch = batches.get(line.batch_id)
        if batch is None or not batch.is_active:
            raise NotFoundError(
                "Batch not found or inactive",
                details={**where, "batch_id": line.batch_id},
            )

        if str(batch.product_id) != line.product_id:
            raise ValidationError(
                "Batch does not belong to product",
                details={**where, "batch_id": line.batch_id, "product_id": line.product_id},
            )

        if batch.expiry_date < today:
            raise InvalidStateError(
                "Batch is expired",
                details={**where, "batch_id": line.batch_id, "expiry_date": batch.expiry_date.isoformat()},
            )

        requested[line.batch_id] += line.quantity
        first_index.setdefault(line.batch_id, line.index)

    for batch_id, qty in requested.items():
        available = int(batches[batch_id].available_qty)
        if qty > available:
            raise InsufficientStockError(
                f"Insufficient stock for batch {batches[batch_id].batch_code}. "
                f"Requested: {qty}, Available: {available}",
                details={
                    "line": first_index[batch_id],
                    "batch_id": batch_id,
                    "requested": qty,
                    "available": available,
                },
            )


@storage_guard
@transaction.atomic
def create_sale(
    *,
    lines,
    payment_method,
    cash_amount=0,
    card_amount=0,
    transfer_amount=0,
    user=None,
) -> Sale:
    """
    lines: iterable of {"product_id", "batch_id", "quantity", "unit_price",
                        "discount_pct"=0, "tax_pct"=SALES_DEFAULT_TAX_PCT}
    """
    method = _normalize_payment_method(payment_method)
    cash = _tendered(cash_amount, field="cash_amount")
    card = _tendered(card_amount, field="card_amount")
    transfer = _tendered(transfer_amount, field="transfer_amount")

    normalized = _normalize_lines(lines)

    batches = lock_batches(line.batch_id for line in normalized)
    products = lock_products(line.product_id for line in normalized)

    try:
        _check_lines(normalized, batches=batches, products=products)
    except (NotFoundError, InvalidStateError, InsufficientStockError, ValidationError) as exc:
        logger.warning(
            "Sale rejected: %s",
            exc.message,
            extra={"code": exc.code, "details": exc.details},
        )
        raise

    amounts = [
        price_line(
            quantity=line.quantity,
            unit_price=line.unit_price,
            discount_pct=line.discount_pct,
            tax_pct=line.tax_pct,
        )
        for line in normalized
    ]
    totals = sum_totals(amounts)

    sale = Sale.objects.create(
        user=user if getattr(user, "is_authenticated", False) else None,
        payment_method=method,
        cash_amount=cash,
        card_amount=card,
        transfer_amount=transfer,
        change_amount=compute_change(
            payment_method=method,
            total=totals.total,
            cash=cash,
            card=card,
            transfer=transfer,
        ),
        subtotal_amount=totals.subtotal,
        discount_amount=totals.discount,
        tax_amount=totals.tax,
        total_amount=totals.total,
        status=Sale.STATUS_COMPLETED,
    )

    SaleLine.objects.bulk_create(
        [
            SaleLine(
                sale=sale,
                line_no=line.index + 1,
                product_id=line.product_id,
                batch_id=line.batch_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                discount_pct=line.discount_pct,
                tax_pct=line.tax_pct,
                subtotal_amount=amount.subtotal,
                discount_amount=amount.discount,
                tax_amount=amount.tax,
                line_total=amount.line_total,
            )
            for line, amount in zip(normalized, amounts)
        ]
    )

    for line in normalized:
        apply_delta(
            product_id=line.product_id,
            batch_id=line.batch_id,
            delta=-line.quantity,
            reason=StockMovement.Reason.SALE,
            reference=sale,
            user=user,
        )

    logger.info(
        "Sale committed",
        extra={
            "sale_id": str(sale.pk),
            "invoice_no": sale.invoice_no,
            "lines": len(normalized),
            "total_amount": str(sale.total_amount),
        },
    )

    return sale
