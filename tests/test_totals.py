import unittest
from decimal import Decimal

from invoice_pdf.totals import compute_totals
from invoice_pdf.view_model import LineItem


class ComputeTotalsTests(unittest.TestCase):
    def test_discount_applies_before_tax(self) -> None:
        totals = compute_totals([{"quantity": 2, "price": 100}], 10, True, 10)

        self.assertEqual(totals.subtotal, Decimal(200))
        self.assertEqual(totals.discount_amount, Decimal(20))
        self.assertEqual(totals.taxable_base, Decimal(180))
        self.assertEqual(totals.tax_amount, Decimal(18))
        self.assertEqual(totals.total, Decimal(198))

    def test_zero_quantity_items_are_excluded(self) -> None:
        items = [
            {"quantity": 1, "price": 50},
            {"quantity": 0, "price": 999},
            {"quantity": -3, "price": 10},
        ]
        totals = compute_totals(items)

        self.assertEqual(totals.subtotal, Decimal(50))
        self.assertEqual(totals.total, Decimal(50))

    def test_empty_items_give_zero_totals(self) -> None:
        totals = compute_totals([], 25, True, 18)

        self.assertEqual(totals.subtotal, 0)
        self.assertEqual(totals.discount_amount, 0)
        self.assertEqual(totals.tax_amount, 0)
        self.assertEqual(totals.total, 0)

    def test_tax_is_ignored_when_disabled(self) -> None:
        totals = compute_totals([{"quantity": 1, "price": 100}], 0, False, 18)

        self.assertEqual(totals.tax_amount, 0)
        self.assertEqual(totals.total, Decimal(100))

    def test_full_discount_zeroes_the_total(self) -> None:
        totals = compute_totals([{"quantity": 4, "price": 25}], 100, True, 10)

        self.assertEqual(totals.discount_amount, Decimal(100))
        self.assertEqual(totals.tax_amount, 0)
        self.assertEqual(totals.total, 0)

    def test_negative_inputs_are_not_rejected(self) -> None:
        totals = compute_totals([{"quantity": 1, "price": -40}], -10, True, 10)

        self.assertEqual(totals.subtotal, Decimal(-40))
        self.assertEqual(totals.discount_amount, Decimal(4))
        self.assertEqual(totals.total, Decimal("-48.4"))

    def test_accepts_line_item_objects_and_decimal_prices(self) -> None:
        items = [
            LineItem(description="Hosting", quantity=3, price=Decimal("19.99")),
            LineItem(description="Removed", quantity=0, price=Decimal(1000)),
        ]
        totals = compute_totals(items)

        self.assertEqual(totals.subtotal, Decimal("59.97"))

    def test_string_values_are_coerced(self) -> None:
        totals = compute_totals([{"quantity": "2", "price": "12.5"}], "0", True, "0")

        self.assertEqual(totals.total, Decimal(25))

    def test_as_dict_uses_json_friendly_numbers(self) -> None:
        totals = compute_totals([{"quantity": 1, "price": "10.5"}], 0, True, 10)
        payload = totals.as_dict()

        self.assertEqual(payload["subtotal"], 10.5)
        self.assertEqual(payload["discount_amount"], 0)
        self.assertIsInstance(payload["discount_amount"], int)
        self.assertAlmostEqual(payload["tax_amount"], 1.05)
        self.assertAlmostEqual(payload["total"], 11.55)


if __name__ == "__main__":
    unittest.main()
