import base64
import io
import unittest
from importlib import util as importlib_util
from unittest.mock import patch

FPDF_AVAILABLE = importlib_util.find_spec("fpdf") is not None
if FPDF_AVAILABLE:
    from PIL import Image

    from invoice_pdf.fonts import FontManager, PdfCanvas, to_latin1
    from invoice_pdf.images import PLACEHOLDER_IMAGE, load_image
    from invoice_pdf.rendering import (
        DocumentGenerationError,
        build_render_inputs,
        generate_document,
        payload_totals,
        render_invoice,
        render_preview,
    )

PAYLOAD = {
    "invoice_number": "INV-001",
    "customer": {"name": "Client LLC", "email": "billing@client.test", "address": "123 Main St, City"},
    "date": "2026-01-15",
    "currency": "USD",
    "items": [
        {"name": "Consulting", "description": "Architecture review", "quantity": 2, "price": 150.0},
        {"name": "Removed", "description": "Soft deleted", "quantity": 0, "price": 999},
    ],
    "discount": 10,
    "tax_rate": 10,
}


@unittest.skipUnless(FPDF_AVAILABLE, "fpdf is not installed")
class RenderingTests(unittest.TestCase):
    def test_render_invoice_returns_pdf_bytes(self) -> None:
        pdf = render_invoice(PAYLOAD)

        self.assertIsInstance(pdf, bytes)
        self.assertTrue(pdf.startswith(b"%PDF"))
        self.assertGreater(len(pdf), 100)

    def test_render_preview_returns_data_uri_and_totals(self) -> None:
        preview = render_preview(PAYLOAD)

        self.assertEqual(preview["filename"], "Client LLC_INV-001.pdf")
        prefix = "data:application/pdf;filename=Client%20LLC_INV-001.pdf;base64,"
        self.assertTrue(preview["data_uri"].startswith(prefix))
        decoded = base64.b64decode(preview["data_uri"][len(prefix):])
        self.assertTrue(decoded.startswith(b"%PDF"))
        self.assertEqual(preview["totals"]["total"], 297)

    def test_data_uri_survives_commas_in_filename(self) -> None:
        payload = dict(PAYLOAD, customer={"name": "Acme, Inc"})
        preview = render_preview(payload)

        self.assertEqual(preview["filename"], "Acme, Inc_INV-001.pdf")
        meta, _, encoded = preview["data_uri"].partition(",")
        self.assertEqual(meta, "data:application/pdf;filename=Acme%2C%20Inc_INV-001.pdf;base64")
        self.assertTrue(base64.b64decode(encoded).startswith(b"%PDF"))

    def test_truncated_logo_and_stamp_do_not_abort_generation(self) -> None:
        buffer = io.BytesIO()
        Image.frombytes("L", (200, 200), bytes(range(256)) * 156 + bytes(64)).save(buffer, "GIF")
        truncated = buffer.getvalue()[:-200]
        payload = {
            "invoice": PAYLOAD,
            "company": {"name": "Globex", "logo": truncated, "stamp": truncated},
        }
        invoice, company, config = build_render_inputs(payload)

        with self.assertLogs("invoice_pdf.images", level="WARNING") as logs:
            result = generate_document(invoice, company, config)

        self.assertTrue(result.pdf_bytes.startswith(b"%PDF"))
        self.assertEqual(len(logs.records), 2)

    def test_canvas_skips_images_the_pdf_backend_rejects(self) -> None:
        canvas = PdfCanvas()
        handle = load_image(PLACEHOLDER_IMAGE)

        with patch.object(canvas.pdf, "image", side_effect=RuntimeError("bad image")):
            with self.assertLogs("invoice_pdf.fonts", level="WARNING"):
                canvas.image(handle, 10, 10, 20, 20)

        self.assertTrue(canvas.output().startswith(b"%PDF"))

    def test_nested_invoice_with_company_and_settings(self) -> None:
        payload = {
            "invoice": PAYLOAD,
            "company": {"name": "Globex", "slogan": ""},
            "settings": {"footer_text": "Onwards", "notes": ""},
        }
        invoice, company, config = build_render_inputs(payload)

        self.assertEqual(invoice.invoice_number, "INV-001")
        self.assertEqual(company.name, "Globex")
        self.assertEqual(config.footer_text, "Onwards")
        self.assertEqual(config.notes, ())
        self.assertTrue(render_invoice(payload).startswith(b"%PDF"))

    def test_long_invoice_renders_multiple_pages(self) -> None:
        items = [{"name": f"Item {i}", "description": "Row", "quantity": 1, "price": 1} for i in range(40)]
        invoice, company, config = build_render_inputs({"invoice_number": "LONG", "items": items})

        result = generate_document(invoice, company, config)

        self.assertTrue(result.pdf_bytes.startswith(b"%PDF"))
        self.assertEqual(result.totals.subtotal, 40)

    def test_payload_totals(self) -> None:
        self.assertEqual(
            payload_totals(PAYLOAD),
            {"subtotal": 300, "discount_amount": 30, "tax_amount": 27, "total": 297},
        )

    def test_failures_are_wrapped(self) -> None:
        invoice, _, _ = build_render_inputs(PAYLOAD)
        with patch("invoice_pdf.rendering.layout_document", side_effect=KeyError("boom")):
            with self.assertLogs("invoice_pdf.rendering", level="ERROR"):
                with self.assertRaises(DocumentGenerationError) as ctx:
                    generate_document(invoice)

        self.assertIn("INV-001", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, KeyError)


@unittest.skipUnless(FPDF_AVAILABLE, "fpdf is not installed")
class FontFallbackTests(unittest.TestCase):
    def test_latin1_transliteration(self) -> None:
        self.assertEqual(to_latin1("₹ 1,000 • paid"), "Rs. 1,000 - paid")
        self.assertEqual(to_latin1("£5"), "£5")

    def test_core_font_is_used_without_unicode_fonts(self) -> None:
        with patch("invoice_pdf.fonts.find_font_path", return_value=None):
            with self.assertLogs("invoice_pdf.fonts", level="WARNING"):
                canvas = PdfCanvas()

        self.assertFalse(canvas.fonts.unicode)
        self.assertEqual(canvas.fonts.family, FontManager.CORE_FAMILY)
        self.assertEqual(canvas.fonts.style_for(True, True), "BI")

        canvas.draw_text(20, 20, "₹ 1,50,000")
        self.assertTrue(canvas.output().startswith(b"%PDF"))


if __name__ == "__main__":
    unittest.main()
