# products/tests/test_normalize.py

from decimal import Decimal

from django.test import SimpleTestCase

from products.services.exceptions import ValidationError
from products.services.normalize import as_mapping, money, to_int, to_percent


class NormalizeTests(SimpleTestCase):
    """
    GUARANTEES:
    - malformed input always raises the typed ValidationError, never a bare ValueError
    - error details keep the caller's line position and name the field
    """

    def test_to_int_accepts_whole_numbers(self):
        self.assertEqual(to_int(7, field="quantity"), 7)
        self.assertEqual(to_int(" 12 ", field="quantity"), 12)
        self.assertEqual(to_int("-3", field="quantity"), -3)
        self.assertEqual(to_int(Decimal("4"), field="quantity"), 4)

    def test_to_int_rejects_malformed_values(self):
        for value in (None, "", True, "--5", "-", "5-", "²", "٣", "1e3", "2.5", 2.0, Decimal("2.5")):
            with self.subTest(value=value):
                with self.assertRaises(ValidationError) as ctx:
                    to_int(value, field="quantity", details={"line": 3})
                self.assertEqual(ctx.exception.details, {"line": 3, "field": "quantity"})

    def test_as_mapping_rejects_non_objects(self):
        self.assertEqual(as_mapping({"quantity": 1}), {"quantity": 1})
        for value in ("LOT-1", 5, None, ["quantity", 1]):
            with self.subTest(value=value):
                with self.assertRaises(ValidationError) as ctx:
                    as_mapping(value, details={"line": 1})
                self.assertEqual(ctx.exception.details, {"line": 1})

    def test_money_and_percent(self):
        self.assertEqual(money(Decimal("1.005")), Decimal("1.01"))
        self.assertEqual(to_percent("19", field="tax_pct"), Decimal("19"))
        with self.assertRaises(ValidationError):
            to_percent("100.01", field="tax_pct")
