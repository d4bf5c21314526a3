# products/tests/test_seed_stock.py

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from products.models import Product, StockBatch
from products.services.invariants import verify_stock_invariants
from purchases.models import ReceivingRecord


class SeedStockCommandTests(TestCase):
    def test_seed_receives_through_the_ledger(self):
        out = StringIO()
        call_command("seed_stock", stdout=out)

        self.assertEqual(Product.objects.count(), 5)
        self.assertEqual(StockBatch.objects.filter(is_active=True).count(), 10)
        self.assertEqual(
            ReceivingRecord.objects.get().status, ReceivingRecord.STATUS_APPROVED
        )
        self.assertEqual(Product.objects.get(sku="PARA-500").stock_total, 50)
        self.assertEqual(verify_stock_invariants(), [])

    def test_no_approve_leaves_a_draft(self):
        call_command("seed_stock", "--no-approve", stdout=StringIO())

        self.assertEqual(ReceivingRecord.objects.get().status, ReceivingRecord.STATUS_DRAFT)
        self.assertFalse(StockBatch.objects.filter(is_active=True).exists())
