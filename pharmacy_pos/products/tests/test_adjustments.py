# products/tests/test_adjustments.py

from unittest import mock

from django.db import OperationalError
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import StockAdjustment, StockAdjustmentLine, StockMovement
from products.services.exceptions import (
    InvalidStateError,
    NotFoundError,
    TransientStorageError,
    ValidationError,
)
from products.services.stock_adjustments import create_adjustment
from products.services.stock_ledger import apply_delta

from .helpers import make_batch, make_product, make_user


class StockAdjustmentServiceTests(TestCase):
    """
    Physical recount tests.

    GUARANTEES:
    - each line records before / after / delta
    - deltas flow through the ledger (reason=ADJUSTMENT)
    - any bad line rejects the whole adjustment
    """

    def setUp(self):
        self.user = make_user()
        self.product = make_product()
        self.batch = make_batch(self.product, qty=8)
        self.other = make_batch(self.product, code="LOT-002", qty=4)

    def test_recount_down_reduces_product_stock(self):
        adjustment = create_adjustment(
            reason="Cycle count",
            lines=[{"batch_id": self.batch.pk, "new_quantity": 5}],
            user=self.user,
        )
        self.batch.refresh_from_db()
        self.product.refresh_from_db()

        line = adjustment.lines.get()
        self.assertEqual(
            (line.quantity_before, line.quantity_after, line.quantity_delta),
            (8, 5, -3),
        )
        self.assertEqual(self.batch.available_qty, 5)
        self.assertEqual(self.product.stock_total, 9)
        self.assertEqual(adjustment.user, self.user)

        movement = StockMovement.objects.get(reason=StockMovement.Reason.ADJUSTMENT)
        self.assertEqual(movement.quantity_delta, -3)
        self.assertEqual(movement.reference_type, "stockadjustment")
        self.assertEqual(movement.reference_id, str(adjustment.pk))

    def test_multi_line_recount_applies_every_line(self):
        create_adjustment(
            reason="Shelf audit",
            lines=[
                {"batch_id": str(self.batch.pk), "new_quantity": "10"},
                {"batch_id": str(self.other.pk), "new_quantity": 0},
            ],
        )
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_total, 10)

    def test_unchanged_count_records_line_without_movement(self):
        adjustment = create_adjustment(
            reason="Spot check",
            lines=[{"batch_id": self.batch.pk, "new_quantity": 8}],
        )
        self.assertEqual(adjustment.lines.get().quantity_delta, 0)
        self.assertFalse(
            StockMovement.objects.filter(reason=StockMovement.Reason.ADJUSTMENT).exists()
        )

    def test_reason_is_required(self):
        with self.assertRaises(ValidationError):
            create_adjustment(reason="  ", lines=[{"batch_id": self.batch.pk, "new_quantity": 1}])

    def test_duplicate_batch_is_rejected(self):
        with self.assertRaises(ValidationError):
            create_adjustment(
                reason="Cycle count",
                lines=[
                    {"batch_id": self.batch.pk, "new_quantity": 1},
                    {"batch_id": self.batch.pk, "new_quantity": 2},
                ],
            )
        self.assertFalse(StockAdjustment.objects.exists())

    def test_negative_quantity_is_rejected(self):
        with self.assertRaises(ValidationError):
            create_adjustment(
                reason="Cycle count",
                lines=[{"batch_id": self.batch.pk, "new_quantity": -1}],
            )

    def test_missing_batch_rejects_whole_adjustment(self):
        with self.assertRaises(NotFoundError):
            create_adjustment(
                reason="Cycle count",
                lines=[
                    {"batch_id": self.batch.pk, "new_quantity": 1},
                    {"batch_id": "00000000-0000-0000-0000-000000000000", "new_quantity": 2},
                ],
            )

        self.batch.refresh_from_db()
        self.assertEqual(self.batch.available_qty, 8)
        self.assertFalse(StockAdjustmentLine.objects.exists())

    def test_inactive_batch_is_rejected(self):
        draft = make_batch(self.product, code="LOT-DRAFT", active=False)
        with self.assertRaises(InvalidStateError):
            create_adjustment(
                reason="Cycle count",
                lines=[{"batch_id": draft.pk, "new_quantity": 3}],
            )

    def test_malformed_lines_are_validation_errors(self):
        bad_lines = [
            [{"batch_id": self.batch.pk, "new_quantity": "--5"}],
            [{"batch_id": self.batch.pk, "new_quantity": "²"}],
            [{"batch_id": self.batch.pk, "new_quantity": "5.0"}],
            [str(self.batch.pk)],
        ]
        for lines in bad_lines:
            with self.subTest(lines=lines):
                with self.assertRaises(ValidationError) as ctx:
                    create_adjustment(reason="Cycle count", lines=lines)
                self.assertEqual(ctx.exception.details["line"], 0)

        self.assertFalse(StockAdjustment.objects.exists())

    def test_failure_after_first_line_rolls_back_everything(self):
        calls = []

        def flaky_apply_delta(**kwargs):
            calls.append(kwargs["batch_id"])
            if len(calls) == 2:
                raise OperationalError("connection dropped")
            return apply_delta(**kwargs)

        with mock.patch(
            "products.services.stock_adjustments.apply_delta", side_effect=flaky_apply_delta
        ):
            with self.assertLogs("products.services.exceptions", level="ERROR"):
                with self.assertRaises(TransientStorageError):
                    create_adjustment(
                        reason="Cycle count",
                        lines=[
                            {"batch_id": self.batch.pk, "new_quantity": 2},
                            {"batch_id": self.other.pk, "new_quantity": 9},
                        ],
                    )

        self.batch.refresh_from_db()
        self.other.refresh_from_db()
        self.product.refresh_from_db()
        self.assertEqual((self.batch.available_qty, self.other.available_qty), (8, 4))
        self.assertEqual(self.product.stock_total, 12)
        self.assertFalse(StockAdjustment.objects.exists())
        self.assertFalse(StockAdjustmentLine.objects.exists())
        self.assertFalse(
            StockMovement.objects.filter(reason=StockMovement.Reason.ADJUSTMENT).exists()
        )


class StockAdjustmentApiTests(TestCase):
    """
    POST /api/products/adjustments/

    GUARANTEES:
    - 201 with the recorded lines
    - service errors use the canonical error body
    """

    url = "/api/products/adjustments/"

    def setUp(self):
        self.client = APIClient()
        self.user = make_user()
        self.client.force_authenticate(self.user)
        self.product = make_product()
        self.batch = make_batch(self.product, qty=8)

    def test_create_adjustment(self):
        res = self.client.post(
            self.url,
            {"reason": "Cycle count", "lines": [{"batch_id": str(self.batch.pk), "new_quantity": 5}]},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["lines"][0]["quantity_delta"], -3)

    def test_unknown_batch_maps_to_404(self):
        res = self.client.post(
            self.url,
            {
                "reason": "Cycle count",
                "lines": [{"batch_id": "00000000-0000-0000-0000-000000000000", "new_quantity": 5}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["error"]["code"], "not_found")

    def test_empty_lines_is_a_validation_error(self):
        res = self.client.post(self.url, {"reason": "Cycle count", "lines": []}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "validation_error")
        self.assertIn("lines", res.data["error"]["details"])

    def test_requires_authentication(self):
        res = APIClient().post(self.url, {}, format="json")
        self.assertEqual(res.status_code, 401)
        self.assertIn("error", res.data)
