# sales/tests/test_stock_flow.py

"""
End-to-end stock flow across receiving, sales, returns and adjustments.
"""

import threading
import unittest
from datetime import timedelta
from decimal import Decimal

from django.db import connection
from django.test import TestCase, TransactionTestCase
from django.utils import timezone

from products.models import StockBatch, StockMovement
from products.services.exceptions import InsufficientStockError
from products.services.invariants import verify_stock_invariants
from products.services.stock_adjustments import create_adjustment
from products.tests.helpers import make_batch, make_product, make_user
from purchases.models import Supplier
from purchases.services.receiving_service import approve_receiving, create_receiving_draft
from sales.models import Sale
from sales.services.return_processor import create_return
from sales.services.sale_processor import create_sale


class StockFlowTests(TestCase):
    """
    GUARANTEES:
    - receive -> sell -> return -> adjust keeps every counter consistent
    - the movement history replays to the final batch quantity
    """

    def setUp(self):
        self.user = make_user("pharmacist")
        self.product = make_product()
        self.supplier = Supplier.objects.create(name="Distribuidora Andina")

    def test_full_lifecycle(self):
        record = create_receiving_draft(
            supplier_id=self.supplier.pk,
            invoice_number="FAC-1001",
            lines=[
                {
                    "product_id": self.product.pk,
                    "batch_code": "LOT-A",
                    "expiry_date": timezone.localdate() + timedelta(days=900),
                    "quantity_received": 10,
                    "purchase_price": "250.00",
                }
            ],
            user=self.user,
        )
        approve_receiving(record_id=record.pk, user=self.user)
        batch = StockBatch.objects.get(product=self.product, batch_code="LOT-A")

        sale = create_sale(
            lines=[
                {
                    "product_id": self.product.pk,
                    "batch_id": batch.pk,
                    "quantity": 4,
                    "unit_price": "500",
                    "tax_pct": "19",
                }
            ],
            payment_method="cash",
            cash_amount="2380",
            user=self.user,
        )
        self.assertEqual(sale.total_amount, Decimal("2380.00"))

        sale_return = create_return(
            sale_id=sale.pk,
            lines=[{"sale_line_id": sale.lines.get().pk, "quantity": 2}],
            refund_method="cash",
            return_type="partial",
            reason="Damaged box",
            user=self.user,
        )
        self.assertEqual(sale_return.total_amount, Decimal("1000.00"))

        create_adjustment(
            reason="Cycle count",
            lines=[{"batch_id": batch.pk, "new_quantity": 5}],
            user=self.user,
        )

        batch.refresh_from_db()
        self.product.refresh_from_db()
        self.assertEqual(batch.available_qty, 5)
        self.assertEqual(self.product.stock_total, 5)
        self.assertEqual(verify_stock_invariants(), [])

        movements = list(StockMovement.objects.filter(batch=batch).order_by("created_at"))
        self.assertEqual(
            [m.reason for m in movements],
            [
                StockMovement.Reason.RECEIPT,
                StockMovement.Reason.SALE,
                StockMovement.Reason.RETURN,
                StockMovement.Reason.ADJUSTMENT,
            ],
        )
        self.assertEqual(sum(m.quantity_delta for m in movements), batch.available_qty)
        self.assertEqual(movements[-1].balance_after, batch.available_qty)

    def test_failed_sale_leaves_no_trace(self):
        batch = make_batch(self.product, qty=10)
        movements_before = StockMovement.objects.count()

        with self.assertRaises(InsufficientStockError):
            create_sale(
                lines=[
                    {
                        "product_id": self.product.pk,
                        "batch_id": batch.pk,
                        "quantity": 100,
                        "unit_price": "500",
                    }
                ],
                payment_method="cash",
            )

        batch.refresh_from_db()
        self.assertEqual(batch.available_qty, 10)
        self.assertEqual(StockMovement.objects.count(), movements_before)
        self.assertFalse(Sale.objects.exists())


@unittest.skipUnless(connection.vendor == "postgresql", "row locks need PostgreSQL")
class ConcurrentSaleTests(TransactionTestCase):
    """Two cashiers racing for the same batch: exactly one sale commits."""

    def test_double_spend_has_one_winner(self):
        product = make_product()
        batch = make_batch(product, qty=10)

        barrier = threading.Barrier(2)
        outcomes = []

        def sell():
            try:
                barrier.wait()
                create_sale(
                    lines=[
                        {
                            "product_id": product.pk,
                            "batch_id": batch.pk,
                            "quantity": 7,
                            "unit_price": "500",
                        }
                    ],
                    payment_method="cash",
                )
                outcomes.append("ok")
            except InsufficientStockError:
                outcomes.append("rejected")
            finally:
                connection.close()

        threads = [threading.Thread(target=sell) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(sorted(outcomes), ["ok", "rejected"])
        batch.refresh_from_db()
        self.assertEqual(batch.available_qty, 3)
        self.assertEqual(verify_stock_invariants(), [])
