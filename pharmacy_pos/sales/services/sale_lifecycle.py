"""
SALE LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Sale entities.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth

completed -> returned   (every unit of every line has come back)
returned is terminal
"""

from products.services.exceptions import InvalidStateError
from sales.models import Sale

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Sale.STATUS_RETURNED,
}

RETURNABLE_STATES = {
    Sale.STATUS_COMPLETED,
}

ALLOWED_TRANSITIONS = {
    Sale.STATUS_COMPLETED: {
        Sale.STATUS_RETURNED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, sale: Sale, target_status: str):
    if not can_transition(
        from_status=sale.status,
        to_status=target_status,
    ):
        raise InvalidStateError(
            f"Sale {sale.id} cannot transition from "
            f"'{sale.status}' to '{target_status}'",
            details={"sale_id": str(sale.id), "status": sale.status},
        )


def validate_returnable(*, sale: Sale):
    if sale.status not in RETURNABLE_STATES:
        raise InvalidStateError(
            f"Sale {sale.id} is '{sale.status}' and accepts no returns",
            details={"sale_id": str(sale.id), "status": sale.status},
        )
