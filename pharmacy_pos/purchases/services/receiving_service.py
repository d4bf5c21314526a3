# purchases/services/receiving_service.py

"""
======================================================
PATH: purchases/services/receiving_service.py
======================================================
GOODS RECEIVING SERVICE

Two-step receiving (DRAFT -> APPROVED):

create_receiving_draft():
1) Validate supplier, products and lines
2) Reject duplicate (supplier, invoice_number) and existing (product, batch_code)
3) Persist the record + one INACTIVE, ZERO-STOCK StockBatch per line
   (no stock impact yet)

approve_receiving():
1) Lock record
2) Validate status (only DRAFT)
3) Activate each line's batch, credit +quantity_received via the stock ledger
   (reason=RECEIPT)
4) Mark record APPROVED + loaded_to_inventory
All of 3) and 4) commit together or not at all.
"""

from __future__ import annotations

import logging
from datetime import date

from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from products.models import Product, StockBatch, StockMovement
from products.services.exceptions import (
    InvalidStateError,
    NotFoundError,
    StockLedgerError,
    ValidationError,
    storage_guard,
)
from products.services.normalize import as_mapping, money, to_decimal, to_int, to_uuid
from products.services.stock_ledger import apply_delta, lock_batches, lock_products
from purchases.models import ReceivingLine, ReceivingRecord, Supplier

logger = logging.getLogger(__name__)


def _to_date(value, *, field: str, details: dict) -> date:
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value or "").strip()) if value else None
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{field} must be a date (YYYY-MM-DD)", details={**details, "field": field})
    return parsed


def _normalize_lines(lines) -> list[dict]:
    if not lines:
        raise ValidationError("A receiving record requires at least one line")

    out = []
    seen = set()

    for index, raw in enumerate(lines):
        where = {"line": index}
        raw = as_mapping(raw, details=where)

        quantity = to_int(raw.get("quantity_received"), field="quantity_received", details=where)
        if quantity < 1:
            raise ValidationError(
                "quantity_received must be at least 1",
                details={**where, "field": "quantity_received"},
            )

        price = to_decimal(raw.get("purchase_price"), field="purchase_price", details=where)
        if price < 0:
            raise ValidationError(
                "purchase_price cannot be negative",
                details={**where, "field": "purchase_price"},
            )

        batch_code = str(raw.get("batch_code") or "").strip()
        if not batch_code:
            raise ValidationError("batch_code is required", details={**where, "field": "batch_code"})

        product_id = to_uuid(raw.get("product_id"), field="product_id", details=where)

        key = (product_id, batch_code)
        if key in seen:
            raise ValidationError(
                "The same batch_code is listed twice for this product",
                details={**where, "batch_code": batch_code},
            )
        seen.add(key)

        out.append(
            {
                "line": index,
                "product_id": product_id,
                "batch_code": batch_code,
                "expiry_date": _to_date(raw.get("expiry_date"), field="expiry_date", details=where),
                "quantity_received": quantity,
                "purchase_price": money(price),
                "notes": str(raw.get("notes") or "").strip(),
            }
        )

    return out


@storage_guard
@transaction.atomic
def create_receiving_draft(
    *,
    supplier_id,
    invoice_number: str,
    lines,
    received_on=None,
    city: str = "",
    responsible: str = "",
    record_type: str = "",
    notes: str = "",
    user=None,
) -> ReceivingRecord:
    """
    lines: iterable of {"product_id", "batch_code", "expiry_date",
                        "quantity_received", "purchase_price", "notes"=""}
    """
    supplier_id = to_uuid(supplier_id, field="supplier_id")

    invoice_number = (invoice_number or "").strip()
    if not invoice_number:
        raise ValidationError("invoice_number is required", details={"field": "invoice_number"})

    received = (
        timezone.localdate()
        if received_on in (None, "")
        else _to_date(received_on, field="received_on", details={})
    )

    normalized = _normalize_lines(lines)

    supplier = Supplier.objects.filter(pk=supplier_id, is_active=True).first()
    if supplier is None:
        raise NotFoundError("Supplier not found or inactive", details={"supplier_id": supplier_id})

    products = {
        str(p.pk): p
        for p in Product.objects.filter(
            pk__in=[line["product_id"] for line in normalized], is_active=True
        )
    }
    for line in normalized:
        if line["product_id"] not in products:
            raise NotFoundError(
                "Product not found or inactive",
                details={"line": line["line"], "product_id": line["product_id"]},
            )

    if ReceivingRecord.objects.filter(supplier=supplier, invoice_number=invoice_number).exists():
        raise ValidationError(
            "A receiving record with this invoice number already exists for the supplier",
            details={"invoice_number": invoice_number},
        )

    for line in normalized:
        if StockBatch.objects.filter(
            product_id=line["product_id"], batch_code=line["batch_code"]
        ).exists():
            raise ValidationError(
                "Batch code already exists for this product",
                details={"line": line["line"], "batch_code": line["batch_code"]},
            )

    try:
        with transaction.atomic():
            record = ReceivingRecord.objects.create(
                supplier=supplier,
                invoice_number=invoice_number,
                received_on=received,
                city=(city or "").strip(),
                responsible=(responsible or "").strip(),
                record_type=(record_type or "").strip(),
                notes=notes or "",
                status=ReceivingRecord.STATUS_DRAFT,
                created_by=user if getattr(user, "is_authenticated", False) else None,
            )

            for line in normalized:
                batch = StockBatch.objects.create(
                    product=products[line["product_id"]],
                    batch_code=line["batch_code"],
                    expiry_date=line["expiry_date"],
                    available_qty=0,
                    purchase_price=line["purchase_price"],
                    is_active=False,
                    notes=line["notes"],
                )
                ReceivingLine.objects.create(
                    record=record,
                    line_no=line["line"] + 1,
                    product=batch.product,
                    batch=batch,
                    quantity_received=line["quantity_received"],
                    purchase_price=line["purchase_price"],
                    notes=line["notes"],
                )
    except IntegrityError as exc:
        # a concurrent draft claimed the invoice number or a batch code first
        logger.warning(
            "Receiving draft rejected: duplicate invoice or batch code",
            extra={"supplier_id": supplier_id, "invoice_number": invoice_number},
        )
        raise ValidationError(
            "A receiving record with this invoice number or batch code already exists",
            details={"invoice_number": invoice_number},
        ) from exc

    logger.info(
        "Receiving draft created",
        extra={
            "record_id": str(record.pk),
            "supplier_id": supplier_id,
            "invoice_number": invoice_number,
            "lines": len(normalized),
        },
    )

    return record


@storage_guard
@transaction.atomic
def approve_receiving(*, record_id, user=None) -> ReceivingRecord:
    record_id = to_uuid(record_id, field="record_id")

    try:
        record = ReceivingRecord.objects.select_for_update().filter(pk=record_id).first()
        if record is None:
            raise NotFoundError("Receiving record not found", details={"record_id": record_id})

        if record.status != ReceivingRecord.STATUS_DRAFT:
            raise InvalidStateError(
                f"Only DRAFT records can be approved (current: {record.status})",
                details={"record_id": record_id, "status": record.status},
            )
    except StockLedgerError as exc:
        logger.warning(
            "Receiving approval rejected: %s",
            exc.message,
            extra={"code": exc.code, "details": exc.details},
        )
        raise

    lines = list(record.lines.order_by("line_no"))
    if not lines:
        raise InvalidStateError("Receiving record has no lines", details={"record_id": record_id})

    batches = lock_batches(str(line.batch_id) for line in lines)
    lock_products(str(line.product_id) for line in lines)

    StockBatch.objects.filter(pk__in=list(batches)).update(
        is_active=True,
        updated_at=timezone.now(),
    )

    for line in lines:
        apply_delta(
            product_id=line.product_id,
            batch_id=line.batch_id,
            delta=line.quantity_received,
            reason=StockMovement.Reason.RECEIPT,
            reference=record,
            user=user,
        )

    record.status = ReceivingRecord.STATUS_APPROVED
    record.loaded_to_inventory = True
    record.approved_by = user if getattr(user, "is_authenticated", False) else None
    record.approved_at = timezone.now()
    record.save()

    logger.info(
        "Receiving approved",
        extra={
            "record_id": str(record.pk),
            "lines": len(lines),
            "units": sum(line.quantity_received for line in lines),
        },
    )

    return record
