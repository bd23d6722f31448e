import unittest
from decimal import Decimal

from invoice_pdf.view_model import (
    DEFAULT_CREATOR_NAME,
    DEFAULT_NOTES,
    DEFAULT_PAYMENT_DETAILS,
    NO_NOTES_PLACEHOLDER,
    UNNAMED_ITEM,
    CompanyProfile,
    InvoiceConfiguration,
    LineItem,
    build_company_profile,
    build_configuration,
    build_view_model,
    normalize_notes,
    resolve_notes,
)


class NotesTests(unittest.TestCase):
    def test_normalize_splits_strings_and_lists(self) -> None:
        self.assertEqual(normalize_notes("one\n\n two \n"), ("one", "two"))
        self.assertEqual(normalize_notes(["a\nb", "  ", "c"]), ("a", "b", "c"))
        self.assertEqual(normalize_notes(None), ())
        self.assertEqual(normalize_notes(42), ("42",))

    def test_invoice_notes_take_priority(self) -> None:
        config = InvoiceConfiguration(notes=("configured",))
        self.assertEqual(resolve_notes(("mine",), config), ("mine",))

    def test_configured_notes_replace_defaults(self) -> None:
        config = InvoiceConfiguration(notes=("configured",))
        self.assertEqual(resolve_notes((), config), ("configured",))

    def test_defaults_when_nothing_is_configured(self) -> None:
        self.assertEqual(resolve_notes((), InvoiceConfiguration()), DEFAULT_NOTES)

    def test_placeholder_when_configured_notes_are_empty(self) -> None:
        config = InvoiceConfiguration(notes=())
        self.assertEqual(resolve_notes((), config), (NO_NOTES_PLACEHOLDER,))


class BuildViewModelTests(unittest.TestCase):
    def test_snake_case_record(self) -> None:
        invoice = build_view_model(
            {
                "invoice_number": "INV-001",
                "customer": {"name": "Acme", "address": "1 Road, Kochi, Kerala"},
                "date": "2024-03-05",
                "due_date": "2024-04-05",
                "currency": "usd",
                "invoice_items": [
                    {"name": "Hosting", "description": "Annual plan", "quantity": 2, "price": "100"},
                ],
                "discount": 10,
                "is_tax_enabled": True,
                "tax_rate": 18,
                "notes": "Pay on time",
                "status": "PAID",
            }
        )

        self.assertEqual(invoice.invoice_number, "INV-001")
        self.assertEqual(invoice.currency, "USD")
        self.assertEqual(invoice.currency_symbol, "$")
        self.assertEqual(invoice.due_date, "2024-04-05")
        self.assertEqual(invoice.customer.address_lines, ["1 Road", "Kochi", "Kerala"])
        self.assertEqual(invoice.items[0].amount, Decimal(200))
        self.assertEqual(invoice.tax_rate, Decimal(18))
        self.assertEqual(invoice.discount_percent, Decimal(10))
        self.assertEqual(invoice.notes, ("Pay on time",))
        self.assertEqual(invoice.status, "paid")

    def test_camel_case_record(self) -> None:
        invoice = build_view_model(
            {
                "invoiceNumber": "INV-002",
                "customer": {"name": "Beta"},
                "date": "2024-01-01",
                "dueDate": "2024-02-01",
                "items": [{"description": "Support", "quantity": 1, "price": 50}],
                "isTaxEnabled": False,
                "taxRate": 5,
                "paymentDetails": {"accountHolder": "B. Holder", "bankName": "Bank"},
                "createdBy": "Ann",
            }
        )

        self.assertEqual(invoice.invoice_number, "INV-002")
        self.assertEqual(invoice.due_date, "2024-02-01")
        self.assertFalse(invoice.tax_enabled)
        self.assertEqual(invoice.tax_rate, Decimal(5))
        self.assertEqual(invoice.payment_details.account_holder, "B. Holder")
        self.assertEqual(invoice.created_by, "Ann")

    def test_defaults_for_missing_fields(self) -> None:
        invoice = build_view_model({"invoice_number": "INV-3", "status": "archived", "currency": "EUR"})

        self.assertEqual(invoice.currency, "INR")
        self.assertEqual(invoice.currency_symbol, "₹")
        self.assertTrue(invoice.tax_enabled)
        self.assertEqual(invoice.tax_rate, Decimal(10))
        self.assertEqual(invoice.status, "draft")
        self.assertEqual(invoice.items, ())
        self.assertIsNone(invoice.due_date)
        self.assertEqual(invoice.created_by, DEFAULT_CREATOR_NAME)
        self.assertEqual(invoice.payment_details, DEFAULT_PAYMENT_DETAILS)

    def test_tax_rate_falls_back_to_configured_default(self) -> None:
        config = InvoiceConfiguration(default_tax_rate=Decimal(12))
        invoice = build_view_model({"invoice_number": "INV-4"}, config)

        self.assertEqual(invoice.tax_rate, Decimal(12))

    def test_blank_payment_details_use_defaults(self) -> None:
        invoice = build_view_model({"payment_details": {"bank_name": "  "}})

        self.assertEqual(invoice.payment_details, DEFAULT_PAYMENT_DETAILS)

    def test_items_keep_zero_quantity_rows_but_hide_them(self) -> None:
        invoice = build_view_model(
            {
                "items": [
                    {"description": "Kept", "quantity": 1, "price": 10},
                    {"description": "Removed", "quantity": 0, "price": 10},
                    "not-an-item",
                ]
            }
        )

        self.assertEqual(len(invoice.items), 2)
        self.assertEqual([item.description for item in invoice.visible_items], ["Kept"])
        self.assertEqual(invoice.totals().total, Decimal(11))

    def test_specs_accept_newline_string(self) -> None:
        invoice = build_view_model(
            {"items": [{"description": "Server", "quantity": 1, "price": 1, "specs": "4 vCPU\n\n8 GB"}]}
        )

        self.assertEqual(invoice.items[0].specs, ("4 vCPU", "8 GB"))


class LineItemTests(unittest.TestCase):
    def test_display_name_falls_back_for_missing_name(self) -> None:
        self.assertEqual(LineItem("desc", 1, Decimal(1)).display_name, UNNAMED_ITEM)
        self.assertEqual(LineItem("desc", 1, Decimal(1), name="   ").display_name, UNNAMED_ITEM)
        self.assertEqual(LineItem("desc", 1, Decimal(1), name="Hosting").display_name, "Hosting")


class SettingsTests(unittest.TestCase):
    def test_company_profile_defaults(self) -> None:
        self.assertEqual(build_company_profile(None), CompanyProfile())
        self.assertEqual(build_company_profile("bad"), CompanyProfile())

    def test_company_profile_overrides_and_aliases(self) -> None:
        company = build_company_profile({"name": "Globex", "uamNumber": "UAM-9", "logo": b"raw"})

        self.assertEqual(company.name, "Globex")
        self.assertEqual(company.registration_number, "UAM-9")
        self.assertEqual(company.logo, b"raw")
        self.assertIn("UAM No: UAM-9", company.contact_block().split("\n"))
        self.assertEqual(len(company.contact_block().split("\n")), 5)

    def test_configuration_from_camel_case(self) -> None:
        config = build_configuration(
            {
                "defaultNotes": "Cheers!",
                "footerText": "Quote",
                "defaultTaxRate": "7.5",
                "accentColor": "#123456",
                "measureRowHeight": "true",
                "notes": "first\nsecond",
            }
        )

        self.assertEqual(config.thank_you_text, "Cheers!")
        self.assertEqual(config.footer_text, "Quote")
        self.assertEqual(config.default_tax_rate, Decimal("7.5"))
        self.assertEqual(config.accent_color, "#123456")
        self.assertTrue(config.measure_row_height)
        self.assertEqual(config.notes, ("first", "second"))

    def test_invoice_prefix_and_due_days_from_settings(self) -> None:
        config = build_configuration({"invoicePrefix": " INV- ", "defaultDueDays": "30"})

        self.assertEqual(config.invoice_prefix, "INV-")
        self.assertEqual(config.default_due_days, 30)
        self.assertIsNone(build_configuration({"default_due_days": -5}).default_due_days)

    def test_default_due_days_fill_missing_due_date(self) -> None:
        config = InvoiceConfiguration(default_due_days=30)

        derived = build_view_model({"date": "2024-03-05"}, config)
        explicit = build_view_model({"date": "2024-03-05", "due_date": "2024-03-10"}, config)
        unparseable = build_view_model({"date": "someday"}, config)

        self.assertEqual(derived.due_date, "2024-04-04")
        self.assertEqual(explicit.due_date, "2024-03-10")
        self.assertIsNone(unparseable.due_date)
        self.assertIsNone(build_view_model({"date": "2024-03-05"}).due_date)

    def test_invoice_prefix_applies_to_numeric_numbers_only(self) -> None:
        config = InvoiceConfiguration(invoice_prefix="INV-")

        self.assertEqual(build_view_model({"invoice_number": "42"}, config).invoice_number, "INV-42")
        self.assertEqual(build_view_model({"invoice_number": "INV-7"}, config).invoice_number, "INV-7")
        self.assertEqual(build_view_model({"invoice_number": ""}, config).invoice_number, "")
        self.assertEqual(build_view_model({"invoice_number": "42"}).invoice_number, "42")

    def test_configuration_without_notes_keeps_defaults(self) -> None:
        config = build_configuration({"footer_text": "Quote"})

        self.assertIsNone(config.notes)
        self.assertEqual(build_configuration(None), InvoiceConfiguration())


if __name__ == "__main__":
    unittest.main()
