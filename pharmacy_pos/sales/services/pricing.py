# sales/services/pricing.py

"""
LINE + SALE PRICING

Money is computed server-side only, 2dp ROUND_HALF_UP per line:

    subtotal   = qty * unit_price
    discount   = subtotal * discount_pct / 100
    taxable    = subtotal - discount
    tax        = taxable * tax_pct / 100
    line_total = taxable + tax

Sale totals are the sums of the line amounts;
total = subtotal - discount + tax.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from products.services.normalize import HUNDRED, ZERO, money


@dataclass(frozen=True)
class LineAmounts:
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class SaleTotals:
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal


def price_line(*, quantity: int, unit_price: Decimal, discount_pct: Decimal, tax_pct: Decimal) -> LineAmounts:
    subtotal = money(Decimal(quantity) * unit_price)
    discount = money(subtotal * discount_pct / HUNDRED)
    taxable = subtotal - discount
    tax = money(taxable * tax_pct / HUNDRED)
    return LineAmounts(
        subtotal=subtotal,
        discount=discount,
        tax=tax,
        line_total=money(taxable + tax),
    )


def sum_totals(lines) -> SaleTotals:
    subtotal = sum((line.subtotal for line in lines), ZERO)
    discount = sum((line.discount for line in lines), ZERO)
    tax = sum((line.tax for line in lines), ZERO)
    return SaleTotals(
        subtotal=money(subtotal),
        discount=money(discount),
        tax=money(tax),
        total=money(subtotal - discount + tax),
    )


def compute_change(*, payment_method: str, total: Decimal, cash: Decimal, card: Decimal, transfer: Decimal) -> Decimal:
    """Change is only handed back for cash / mixed payments."""
    if payment_method not in ("cash", "mixed"):
        return ZERO
    return money(max(cash + card + transfer - total, ZERO))
