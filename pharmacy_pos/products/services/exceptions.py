# products/services/exceptions.py

"""
STOCK SERVICE ERRORS

Centralized domain errors for every stock-mutating service
(ledger, sale, return, adjustment, receiving).

Every error carries:
- code:    stable machine code used by the API layer
- details: dict naming the offending entity / line index

Business-rule errors are raised BEFORE any write, so the enclosing
transaction.atomic() block has nothing to keep.
"""

from __future__ import annotations

import functools
import logging

from django.db import InterfaceError, OperationalError

logger = logging.getLogger(__name__)


class StockLedgerError(Exception):
    """Base exception for all stock service failures."""

    code = "stock_error"

    def __init__(self, message: str = "", *, details: dict | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.details = dict(details or {})


class NotFoundError(StockLedgerError):
    """Referenced product, batch, sale, sale line, supplier or record does not exist."""

    code = "not_found"


class InvalidStateError(StockLedgerError):
    """Entity exists but is in a state that forbids the operation."""

    code = "invalid_state"


class InsufficientStockError(StockLedgerError):
    """Requested quantity exceeds a batch's available quantity."""

    code = "insufficient_stock"


class OverReturnError(StockLedgerError):
    """Return quantity exceeds sold minus already-returned."""

    code = "over_return"


class ValidationError(StockLedgerError):
    """Malformed input (quantities, percentages, methods, mismatched ids)."""

    code = "validation_error"


class NegativeStockInvariantViolation(StockLedgerError):
    """
    A ledger write would have produced negative stock.

    Processors check availability first, so reaching this is a bug
    (or a race the guarded UPDATE caught). Not retryable.
    """

    code = "negative_stock_invariant"


class TransientStorageError(StockLedgerError):
    """Database unavailable / connection dropped. The operation may be retried."""

    code = "transient_storage"


def storage_guard(func):
    """
    Re-raise infrastructure failures as TransientStorageError.

    Apply OUTSIDE @transaction.atomic so the rollback has already
    happened when the error is translated.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            logger.error(
                "Storage failure during %s",
                func.__name__,
                exc_info=True,
                extra={"operation": func.__name__},
            )
            raise TransientStorageError(
                "Storage temporarily unavailable; retry the operation.",
                details={"operation": func.__name__},
            ) from exc

    return wrapper
