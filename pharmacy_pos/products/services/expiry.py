# products/services/expiry.py

"""
EXPIRY CLASSIFICATION

Pure functions over (expiry_date - today). Nothing here is persisted.

Buckets (thresholds from settings, calendar months):
- CRITICAL: expiry_date <= today + STOCK_EXPIRY_CRITICAL_MONTHS  (expired included)
- WARNING:  expiry_date <= today + STOCK_EXPIRY_WARNING_MONTHS
- NORMAL:   anything later
"""

from __future__ import annotations

import calendar
from datetime import date

from django.conf import settings
from django.db import models
from django.utils import timezone


class ExpiryBucket(models.TextChoices):
    CRITICAL = "CRITICAL", "Critical"
    WARNING = "WARNING", "Warning"
    NORMAL = "NORMAL", "Normal"


def add_months(d: date, months: int) -> date:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_until_expiry(expiry_date: date, *, today: date | None = None) -> int:
    today = today or timezone.localdate()
    return (expiry_date - today).days


def classify_expiry(expiry_date: date, *, today: date | None = None) -> ExpiryBucket:
    today = today or timezone.localdate()

    critical = int(getattr(settings, "STOCK_EXPIRY_CRITICAL_MONTHS", 6))
    warning = int(getattr(settings, "STOCK_EXPIRY_WARNING_MONTHS", 12))

    if expiry_date <= add_months(today, critical):
        return ExpiryBucket.CRITICAL
    if expiry_date <= add_months(today, warning):
        return ExpiryBucket.WARNING
    return ExpiryBucket.NORMAL
