"""Invoice PDF generation: runs the section pipeline and packages the result."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import quote

from .fonts import PdfCanvas
from .formatting import safe_filename
from .images import load_image_or_default
from .pdf_constants import HEADER_BLOCK_H, TITLE_BLOCK_H
from .sections import (
    DrawingCanvas,
    SectionPositions,
    add_client_section,
    add_footer_section,
    add_header_section,
    add_invoice_table,
    add_invoice_title_section,
    add_payment_section,
    add_total_section,
    client_block_height,
    hex_to_rgb,
)
from .totals import DerivedTotals
from .view_model import (
    CompanyProfile,
    InvoiceConfiguration,
    InvoiceViewModel,
    build_company_profile,
    build_configuration,
    build_view_model,
    resolve_notes,
)

logger = logging.getLogger(__name__)


class DocumentGenerationError(RuntimeError):
    """Raised when an invoice document cannot be produced."""


@dataclass(frozen=True)
class DocumentResult:
    pdf_bytes: bytes
    data_uri: str
    filename: str
    totals: DerivedTotals


def to_data_uri(pdf_bytes: bytes, filename: str) -> str:
    encoded = base64.b64encode(pdf_bytes).decode("ascii")
    return f"data:application/pdf;filename={quote(filename, safe='')};base64,{encoded}"


def document_filename(invoice: InvoiceViewModel) -> str:
    return safe_filename(f"{invoice.customer.name}_{invoice.invoice_number}") + ".pdf"


def layout_document(
    canvas: DrawingCanvas,
    invoice: InvoiceViewModel,
    company: CompanyProfile,
    config: InvoiceConfiguration,
) -> DerivedTotals:
    """Paint every section of the invoice onto canvas, top to bottom, and return its totals."""
    totals = invoice.totals()
    accent = hex_to_rgb(config.accent_color)
    logo = load_image_or_default(company.logo)
    stamp = load_image_or_default(company.stamp, fallback=None)

    positions = SectionPositions(
        current_y=0.0,
        page_width=canvas.page_width,
        page_height=canvas.page_height,
    )

    add_header_section(canvas, company, positions, logo, accent)
    positions = positions.advance(HEADER_BLOCK_H)
    add_invoice_title_section(canvas, invoice, positions)
    positions = positions.advance(TITLE_BLOCK_H)
    add_client_section(canvas, invoice, positions, accent)
    positions = positions.advance(client_block_height(invoice))

    positions = add_invoice_table(canvas, invoice, totals, positions, config.measure_row_height)
    positions = add_total_section(canvas, invoice, totals, positions, accent)
    positions = add_payment_section(canvas, invoice, company, positions, stamp)
    add_footer_section(canvas, config, resolve_notes(invoice.notes, config), positions, accent)
    return totals


def generate_document(
    invoice: InvoiceViewModel,
    company: Optional[CompanyProfile] = None,
    config: Optional[InvoiceConfiguration] = None,
) -> DocumentResult:
    company = company or CompanyProfile()
    config = config or InvoiceConfiguration()
    try:
        canvas = PdfCanvas()
        totals = layout_document(canvas, invoice, company, config)
        pdf_bytes = canvas.output()
    except Exception as exc:
        logger.exception("Invoice %r could not be generated", invoice.invoice_number)
        raise DocumentGenerationError(
            f"Could not generate invoice {invoice.invoice_number!r}: {exc}"
        ) from exc

    filename = document_filename(invoice)
    return DocumentResult(
        pdf_bytes=pdf_bytes,
        data_uri=to_data_uri(pdf_bytes, filename),
        filename=filename,
        totals=totals,
    )


def build_render_inputs(
    payload: Mapping[str, Any],
) -> Tuple[InvoiceViewModel, CompanyProfile, InvoiceConfiguration]:
    """Split a request payload into invoice, company profile and configuration.

    The invoice fields may sit at the top level or under ``"invoice"``;
    ``"company"`` and ``"settings"`` are optional objects.
    """
    config = build_configuration(payload.get("settings"))
    company = build_company_profile(payload.get("company"))
    record = payload.get("invoice")
    if not isinstance(record, Mapping):
        record = payload
    return build_view_model(record, config), company, config


def render_invoice(payload: Dict[str, Any]) -> bytes:
    return generate_document(*build_render_inputs(payload)).pdf_bytes


def render_preview(payload: Dict[str, Any]) -> Dict[str, Any]:
    result = generate_document(*build_render_inputs(payload))
    return {
        "filename": result.filename,
        "data_uri": result.data_uri,
        "totals": result.totals.as_dict(),
    }


def payload_totals(payload: Dict[str, Any]) -> Dict[str, Any]:
    invoice, _, _ = build_render_inputs(payload)
    return invoice.totals().as_dict()
