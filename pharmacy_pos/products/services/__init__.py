from .stock_ledger import LedgerResult, apply_delta
from .stock_adjustments import create_adjustment
from .expiry import ExpiryBucket, classify_expiry, days_until_expiry
from .invariants import InvariantBreach, verify_stock_invariants

__all__ = [
    "LedgerResult",
    "apply_delta",
    "create_adjustment",
    "ExpiryBucket",
    "classify_expiry",
    "days_until_expiry",
    "InvariantBreach",
    "verify_stock_invariants",
]
