# products/services/normalize.py

"""
INPUT NORMALIZERS (shared by stock services)

HARD RULES:
- quantities are whole integer units (bool is rejected even though it is an int)
- money is Decimal, quantized to 2dp with ROUND_HALF_UP
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from products.services.exceptions import ValidationError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

_INT_RE = re.compile(r"-?[0-9]+")


def money(value) -> Decimal:
    return Decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def to_int(value, *, field: str, details: dict | None = None) -> int:
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", details={**(details or {}), "field": field})

    if isinstance(value, int):
        return value

    if isinstance(value, str) and _INT_RE.fullmatch(value.strip()):
        return int(value.strip())

    if isinstance(value, Decimal) and value == value.to_integral_value():
        return int(value)

    raise ValidationError(f"{field} must be an integer", details={**(details or {}), "field": field})


def to_decimal(value, *, field: str, details: dict | None = None) -> Decimal:
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", details={**(details or {}), "field": field})

    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError(
            f"{field} must be a number", details={**(details or {}), "field": field}
        ) from exc

    if not d.is_finite():
        raise ValidationError(f"{field} must be a number", details={**(details or {}), "field": field})

    return d


def to_percent(value, *, field: str, details: dict | None = None) -> Decimal:
    d = to_decimal(value, field=field, details=details)
    if d < 0 or d > HUNDRED:
        raise ValidationError(
            f"{field} must be between 0 and 100",
            details={**(details or {}), "field": field},
        )
    return d


def to_uuid(value, *, field: str, details: dict | None = None) -> str:
    """Canonical hyphenated string form, used as dict key for locked rows."""
    try:
        return str(value if isinstance(value, uuid.UUID) else uuid.UUID(str(value)))
    except (ValueError, TypeError, AttributeError) as exc:
        raise ValidationError(
            f"{field} must be a valid UUID", details={**(details or {}), "field": field}
        ) from exc


def as_mapping(value, *, details: dict | None = None) -> Mapping:
    if not isinstance(value, Mapping):
        raise ValidationError("Each line must be an object", details=details or {})
    return value
