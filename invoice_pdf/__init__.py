"""Public package API for invoice PDF generation."""

from __future__ import annotations

from typing import Any, Dict

from .formatting import convert_number_to_words, format_currency, format_date
from .totals import DerivedTotals, compute_totals
from .view_model import (
    CompanyProfile,
    InvoiceConfiguration,
    InvoiceViewModel,
    LineItem,
    build_view_model,
)


def generate_document(*args: Any, **kwargs: Any):
    from .rendering import generate_document as _generate_document

    return _generate_document(*args, **kwargs)


def render_invoice(data: Dict[str, Any]) -> bytes:
    from .rendering import render_invoice as _render_invoice

    return _render_invoice(data)


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    from .server import run as _run

    _run(host, port)


__all__ = [
    "CompanyProfile",
    "DerivedTotals",
    "InvoiceConfiguration",
    "InvoiceViewModel",
    "LineItem",
    "build_view_model",
    "compute_totals",
    "convert_number_to_words",
    "format_currency",
    "format_date",
    "generate_document",
    "render_invoice",
    "run",
]
