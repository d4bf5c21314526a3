# sales/tests/test_sale_processor.py

from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.db import OperationalError
from django.test import TestCase
from django.utils import timezone

from products.models import InventoryAggregate, StockMovement
from products.services.exceptions import (
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
    TransientStorageError,
    ValidationError,
)
from products.services.stock_ledger import apply_delta
from products.tests.helpers import make_batch, make_product, make_user
from sales.models import Sale, SaleLine
from sales.services.sale_processor import create_sale


class SaleProcessorTests(TestCase):
    """
    Sale transaction tests.

    GUARANTEES:
    - money is computed server-side, 2dp ROUND_HALF_UP per line
    - every line debits its own batch through the ledger
    - any rejected line leaves no Sale and no stock change
    """

    def setUp(self):
        self.user = make_user("cashier")
        self.product = make_product()
        self.batch = make_batch(self.product, qty=10)

    def _line(self, qty, batch=None, **extra):
        batch = batch or self.batch
        return {
            "product_id": batch.product_id,
            "batch_id": batch.pk,
            "quantity": qty,
            "unit_price": "500",
            **extra,
        }

    def _assert_untouched(self, qty=10):
        self.batch.refresh_from_db()
        self.product.refresh_from_db()
        self.assertEqual(self.batch.available_qty, qty)
        self.assertEqual(self.product.stock_total, qty)
        self.assertFalse(Sale.objects.exists())
        self.assertFalse(StockMovement.objects.filter(reason=StockMovement.Reason.SALE).exists())

    def test_single_line_sale_with_default_tax(self):
        sale = create_sale(
            lines=[self._line(4, tax_pct="19")],
            payment_method="cash",
            cash_amount="2500",
            user=self.user,
        )
        line = sale.lines.get()

        self.assertEqual(line.subtotal_amount, Decimal("2000.00"))
        self.assertEqual(line.tax_amount, Decimal("380.00"))
        self.assertEqual(line.line_total, Decimal("2380.00"))
        self.assertEqual(sale.total_amount, Decimal("2380.00"))
        self.assertEqual(sale.change_amount, Decimal("120.00"))
        self.assertEqual(sale.status, Sale.STATUS_COMPLETED)
        self.assertTrue(sale.invoice_no.startswith("INV"))

        self.batch.refresh_from_db()
        self.product.refresh_from_db()
        self.assertEqual(self.batch.available_qty, 6)
        self.assertEqual(self.product.stock_total, 6)
        self.assertEqual(InventoryAggregate.objects.get(product=self.product).total_stock, 6)

        movement = StockMovement.objects.get(reason=StockMovement.Reason.SALE)
        self.assertEqual(movement.quantity_delta, -4)
        self.assertEqual(movement.reference_id, str(sale.pk))
        self.assertEqual(movement.performed_by, self.user)

    def test_omitted_tax_uses_default_rate(self):
        sale = create_sale(lines=[self._line(1)], payment_method="card")
        self.assertEqual(sale.lines.get().tax_pct, Decimal("19.00"))
        self.assertEqual(sale.change_amount, Decimal("0.00"))

    def test_discount_is_applied_before_tax(self):
        sale = create_sale(
            lines=[self._line(3, unit_price="33.33", discount_pct="10", tax_pct="19")],
            payment_method="card",
        )
        line = sale.lines.get()
        # 99.99 - 10.00 = 89.99 ; tax 17.0981 -> 17.10
        self.assertEqual(line.subtotal_amount, Decimal("99.99"))
        self.assertEqual(line.discount_amount, Decimal("10.00"))
        self.assertEqual(line.tax_amount, Decimal("17.10"))
        self.assertEqual(line.line_total, Decimal("107.09"))

    def test_lines_are_numbered_in_input_order(self):
        second = make_batch(self.product, code="LOT-002", qty=5)
        sale = create_sale(
            lines=[self._line(1, batch=second), self._line(2)],
            payment_method="transfer",
        )
        lines = list(sale.lines.order_by("line_no"))
        self.assertEqual([(l.line_no, l.batch_id) for l in lines], [(1, second.pk), (2, self.batch.pk)])

    def test_selling_the_whole_batch_reaches_zero(self):
        create_sale(lines=[self._line(10)], payment_method="cash")
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.available_qty, 0)

    def test_insufficient_stock_rejects_sale(self):
        with self.assertLogs("sales.services.sale_processor", level="WARNING"):
            with self.assertRaises(InsufficientStockError) as ctx:
                create_sale(lines=[self._line(100)], payment_method="cash")

        self.assertEqual(ctx.exception.details["requested"], 100)
        self.assertEqual(ctx.exception.details["available"], 10)
        self._assert_untouched()

    def test_lines_sharing_a_batch_are_summed(self):
        with self.assertRaises(InsufficientStockError):
            create_sale(lines=[self._line(6), self._line(5)], payment_method="cash")
        self._assert_untouched()

    def test_one_bad_line_aborts_every_line(self):
        other = make_product(sku="IBU-400", name="Ibuprofen 400mg")
        other_batch = make_batch(other, code="IBU-LOT", qty=1)

        with self.assertRaises(InsufficientStockError) as ctx:
            create_sale(
                lines=[self._line(2), self._line(3, batch=other_batch)],
                payment_method="cash",
            )

        self.assertEqual(ctx.exception.details["line"], 1)
        self._assert_untouched()

    def test_expired_batch_is_not_sellable(self):
        expired = make_batch(
            self.product,
            code="LOT-OLD",
            qty=5,
            expiry=timezone.localdate() - timedelta(days=1),
        )
        with self.assertRaises(InvalidStateError):
            create_sale(lines=[self._line(1, batch=expired)], payment_method="cash")

    def test_batch_expiring_today_is_sellable(self):
        today = make_batch(self.product, code="LOT-TODAY", qty=2, expiry=timezone.localdate())
        create_sale(lines=[self._line(2, batch=today)], payment_method="cash")
        today.refresh_from_db()
        self.assertEqual(today.available_qty, 0)

    def test_inactive_batch_is_not_found(self):
        draft = make_batch(self.product, code="LOT-DRAFT", active=False)
        with self.assertRaises(NotFoundError):
            create_sale(lines=[self._line(1, batch=draft)], payment_method="cash")

    def test_inactive_product_is_not_found(self):
        self.product.is_active = False
        self.product.save(update_fields=["is_active"])
        with self.assertRaises(NotFoundError):
            create_sale(lines=[self._line(1)], payment_method="cash")

    def test_batch_product_mismatch_is_rejected(self):
        other = make_product(sku="IBU-400", name="Ibuprofen 400mg")
        with self.assertRaises(ValidationError):
            create_sale(
                lines=[self._line(1, product_id=other.pk)],
                payment_method="cash",
            )

    def test_input_validation(self):
        bad_inputs = [
            {"lines": [], "payment_method": "cash"},
            {"lines": [self._line(0)], "payment_method": "cash"},
            {"lines": [self._line("2.5")], "payment_method": "cash"},
            {"lines": [self._line(1, discount_pct="101")], "payment_method": "cash"},
            {"lines": [self._line(1, unit_price="-1")], "payment_method": "cash"},
            {"lines": [self._line(1)], "payment_method": "barter"},
            {"lines": [self._line(1)], "payment_method": "cash", "cash_amount": "-5"},
        ]
        for kwargs in bad_inputs:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValidationError):
                    create_sale(**kwargs)
        self._assert_untouched()

    def test_sequential_double_spend_leaves_one_winner(self):
        create_sale(lines=[self._line(7)], payment_method="cash")
        with self.assertRaises(InsufficientStockError):
            create_sale(lines=[self._line(7)], payment_method="cash")

        self.batch.refresh_from_db()
        self.assertEqual(self.batch.available_qty, 3)
        self.assertEqual(Sale.objects.count(), 1)

    def test_storage_failure_becomes_transient_error(self):
        with mock.patch(
            "sales.services.sale_processor.lock_batches",
            side_effect=OperationalError("database is locked"),
        ):
            with self.assertLogs("products.services.exceptions", level="ERROR"):
                with self.assertRaises(TransientStorageError) as ctx:
                    create_sale(lines=[self._line(1)], payment_method="cash")

        self.assertEqual(ctx.exception.details["operation"], "create_sale")
        self._assert_untouched()

    def test_sale_financials_are_immutable(self):
        sale = create_sale(lines=[self._line(1)], payment_method="cash")
        sale.total_amount = Decimal("1.00")
        with self.assertRaises(ValueError):
            sale.save()

    def test_new_sale_line_has_full_remaining_quantity(self):
        sale = create_sale(lines=[self._line(2)], payment_method="cash")
        self.assertEqual(SaleLine.objects.get(sale=sale).remaining_quantity, 2)

    def test_failure_after_first_debit_rolls_back_everything(self):
        second = make_batch(self.product, code="LOT-002", qty=5)
        calls = []

        def flaky_apply_delta(**kwargs):
            calls.append(kwargs["batch_id"])
            if len(calls) == 2:
                raise OperationalError("connection dropped")
            return apply_delta(**kwargs)

        with mock.patch("sales.services.sale_processor.apply_delta", side_effect=flaky_apply_delta):
            with self.assertLogs("products.services.exceptions", level="ERROR"):
                with self.assertRaises(TransientStorageError):
                    create_sale(
                        lines=[self._line(2), self._line(1, batch=second)],
                        payment_method="cash",
                    )

        self.batch.refresh_from_db()
        second.refresh_from_db()
        self.product.refresh_from_db()
        self.assertEqual(self.batch.available_qty, 10)
        self.assertEqual(second.available_qty, 5)
        self.assertEqual(self.product.stock_total, 15)
        self.assertFalse(Sale.objects.exists())
        self.assertFalse(StockMovement.objects.filter(reason=StockMovement.Reason.SALE).exists())
