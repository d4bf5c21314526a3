# backend/errors.py

"""
API ERROR NORMALIZATION

Canonical error body:
    {"error": {"code": ..., "message": ..., "details": {...}}}

Stock service errors map to HTTP status by type.
"""

from __future__ import annotations

from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from products.services.exceptions import (
    InsufficientStockError,
    InvalidStateError,
    NegativeStockInvariantViolation,
    NotFoundError,
    OverReturnError,
    StockLedgerError,
    TransientStorageError,
    ValidationError,
)

STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (InsufficientStockError, status.HTTP_409_CONFLICT),
    (OverReturnError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (TransientStorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (NegativeStockInvariantViolation, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def error_response(*, code: str, message: str, http_status: int, details: dict | None = None):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message, "details": details or {}}},
        status=http_status,
    )


def stock_error_response(exc: StockLedgerError):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_cls, mapped in STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            http_status = mapped
            break

    message = exc.message
    if http_status == status.HTTP_500_INTERNAL_SERVER_ERROR:
        message = "Internal stock consistency error"

    return error_response(
        code=exc.code,
        message=message,
        http_status=http_status,
        details=exc.details,
    )


def api_exception_handler(exc, context):
    """
    DRF EXCEPTION_HANDLER: same body shape for serializer / auth / 404 errors.
    """
    if isinstance(exc, StockLedgerError):
        return stock_error_response(exc)

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        code = "validation_error"
        message = "Invalid input"
        details = response.data if isinstance(response.data, dict) else {"errors": response.data}
    elif isinstance(exc, Http404):
        code = "not_found"
        message = "Not found."
        details = {}
    else:
        code = getattr(exc, "default_code", "error")
        detail = getattr(exc, "detail", "")
        message = str(detail) if detail else str(exc)
        details = {}

    response.data = {"error": {"code": code, "message": message, "details": details}}
    return response
