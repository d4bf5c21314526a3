# products/tests/test_invariants.py

from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from products.models import InventoryAggregate, Product, StockBatch
from products.services.invariants import verify_stock_invariants

from .helpers import make_batch, make_product


class StockInvariantTests(TestCase):
    """
    Reconciliation tests.

    GUARANTEES:
    - ledger-only writes never produce a breach
    - writes that bypass the ledger are reported, never repaired
    """

    def setUp(self):
        self.product = make_product()
        self.batch = make_batch(self.product, qty=12)
        make_batch(self.product, code="LOT-002", qty=3)

    def test_ledger_writes_hold_invariants(self):
        self.assertEqual(verify_stock_invariants(), [])

    def test_product_without_stock_needs_no_aggregate(self):
        make_product(sku="NEW-1", name="Amoxicillin 500mg")
        self.assertEqual(verify_stock_invariants(), [])

    def test_batch_written_outside_ledger_is_reported(self):
        StockBatch.objects.filter(pk=self.batch.pk).update(available_qty=7)

        kinds = {b.kind for b in verify_stock_invariants()}
        self.assertEqual(kinds, {"stock_total_vs_batches"})

    def test_aggregate_drift_is_reported(self):
        InventoryAggregate.objects.filter(product=self.product).update(total_stock=1)

        breaches = verify_stock_invariants([self.product.pk])
        self.assertEqual(len(breaches), 1)
        self.assertEqual(breaches[0].kind, "aggregate_vs_stock_total")
        self.assertEqual((breaches[0].expected, breaches[0].actual), (15, 1))

    def test_inactive_batch_holding_stock_is_reported(self):
        StockBatch.objects.filter(pk=self.batch.pk).update(is_active=False)

        kinds = {b.kind for b in verify_stock_invariants()}
        self.assertIn("inactive_batch_with_stock", kinds)
        self.assertIn("stock_total_vs_batches", kinds)

    def test_check_is_read_only(self):
        Product.objects.filter(pk=self.product.pk).update(stock_total=99)
        verify_stock_invariants()

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_total, 99)


class CheckStockInvariantsCommandTests(TestCase):
    def setUp(self):
        self.product = make_product()
        self.batch = make_batch(self.product, qty=5)

    def test_clean_ledger_reports_success(self):
        out = StringIO()
        call_command("check_stock_invariants", stdout=out)
        self.assertIn("Stock invariants hold.", out.getvalue())

    def test_breach_fails_the_command(self):
        StockBatch.objects.filter(pk=self.batch.pk).update(available_qty=2)

        err = StringIO()
        with self.assertRaises(CommandError):
            call_command("check_stock_invariants", stderr=err)
        self.assertIn("stock_total_vs_batches", err.getvalue())

    def test_product_filter(self):
        other = make_product(sku="IBU-400", name="Ibuprofen 400mg")
        StockBatch.objects.filter(pk=self.batch.pk).update(available_qty=2)

        out = StringIO()
        call_command("check_stock_invariants", "--product", str(other.pk), stdout=out)
        self.assertIn("Stock invariants hold.", out.getvalue())
