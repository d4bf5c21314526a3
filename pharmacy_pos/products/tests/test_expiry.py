# products/tests/test_expiry.py

from datetime import date, timedelta

from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from products.services.expiry import ExpiryBucket, add_months, classify_expiry, days_until_expiry

from .helpers import make_batch, make_product, make_user

TODAY = date(2025, 1, 15)


@override_settings(STOCK_EXPIRY_CRITICAL_MONTHS=6, STOCK_EXPIRY_WARNING_MONTHS=12)
class ExpiryClassificationTests(SimpleTestCase):
    """
    GUARANTEES:
    - CRITICAL up to and including today + 6 months (expired included)
    - WARNING up to and including today + 12 months
    - NORMAL beyond
    """

    def test_add_months_clamps_day(self):
        self.assertEqual(add_months(date(2024, 8, 31), 6), date(2025, 2, 28))
        self.assertEqual(add_months(date(2024, 11, 30), 3), date(2025, 2, 28))
        self.assertEqual(add_months(date(2023, 8, 31), 6), date(2024, 2, 29))

    def test_buckets_at_boundaries(self):
        cases = [
            (date(2024, 12, 1), ExpiryBucket.CRITICAL),
            (TODAY, ExpiryBucket.CRITICAL),
            (date(2025, 7, 15), ExpiryBucket.CRITICAL),
            (date(2025, 7, 16), ExpiryBucket.WARNING),
            (date(2026, 1, 15), ExpiryBucket.WARNING),
            (date(2026, 1, 16), ExpiryBucket.NORMAL),
        ]
        for expiry, bucket in cases:
            with self.subTest(expiry=expiry):
                self.assertEqual(classify_expiry(expiry, today=TODAY), bucket)

    @override_settings(STOCK_EXPIRY_CRITICAL_MONTHS=3, STOCK_EXPIRY_WARNING_MONTHS=6)
    def test_thresholds_come_from_settings(self):
        self.assertEqual(classify_expiry(date(2025, 5, 1), today=TODAY), ExpiryBucket.WARNING)
        self.assertEqual(classify_expiry(date(2025, 8, 1), today=TODAY), ExpiryBucket.NORMAL)

    def test_days_until_expiry(self):
        self.assertEqual(days_until_expiry(date(2025, 1, 20), today=TODAY), 5)
        self.assertEqual(days_until_expiry(date(2025, 1, 10), today=TODAY), -5)


class StockBatchApiTests(TestCase):
    """GET /api/products/batches/<uuid>/ exposes the derived expiry bucket."""

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(make_user())
        self.product = make_product()

    def test_batch_detail_includes_bucket(self):
        batch = make_batch(
            self.product,
            qty=3,
            expiry=timezone.localdate() + timedelta(days=30),
        )
        res = self.client.get(f"/api/products/batches/{batch.pk}/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["expiry_bucket"], "CRITICAL")
        self.assertEqual(res.data["days_until_expiry"], 30)
        self.assertEqual(res.data["available_qty"], 3)
        self.assertEqual(res.data["product_sku"], "PCM-500")

    def test_unknown_batch_is_404(self):
        res = self.client.get("/api/products/batches/00000000-0000-0000-0000-000000000000/")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["error"]["code"], "not_found")
