"""Section builders for the invoice page layout.

Each builder paints one region of the page starting at
``SectionPositions.current_y``. Fixed-height sections (header, title, bill-to)
return nothing and the caller advances the cursor by the section's height:
a constant for the header and title, and ``client_block_height`` for the
bill-to block. Variable-height sections (item table, totals, payment,
footer) return new positions whose ``current_y`` is just below what they
drew.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from .formatting import (
    DEFAULT_CURRENCY,
    convert_number_to_words,
    format_currency,
    format_date,
    to_decimal,
    whole_units,
)
from .images import ImageHandle
from .pdf_constants import (
    ACCENT_BAR_H,
    BANNER_GAP,
    BANNER_MIN_H,
    BANNER_RULE_GAP,
    BANNER_TEXT_DY,
    BANNER_TEXT_PAD,
    BANNER_TOP_DY,
    CELL_PAD,
    CHIP_H,
    CHIP_TEXT_DY,
    CHIP_W,
    CLIENT_BLOCK_H,
    CLIENT_LINE_H,
    CLIENT_NAME_DY,
    CLIENT_RULE_GAP,
    CLIENT_RULE_PAD,
    COLOR_ACCENT,
    COLOR_MUTED,
    COLOR_PANEL,
    COLOR_RULE,
    COLOR_SLOGAN,
    COLOR_TEXT,
    COLOR_WHITE,
    COMPANY_INFO_Y,
    COMPANY_LINE_H,
    DESC_COL_RATIO,
    FIRST_ROW_DY,
    FONT_SIZE_NORMAL,
    FONT_SIZE_SPEC,
    FONT_SIZE_TABLE,
    FONT_SIZE_THANKS,
    FONT_SIZE_TITLE,
    HEADER_RULE_Y,
    ITEM_COL_RATIO,
    ITEMS_END_UP,
    LINE_H,
    LOGO_H,
    LOGO_W,
    LOGO_Y,
    MARGIN,
    NOTES_BAND_GAP,
    NOTES_BOTTOM_PAD,
    NOTES_INSET,
    NOTES_LABEL_DY,
    NOTES_TEXT_DY,
    PAGE_H,
    PAGE_W,
    PAYMENT_BLOCK_H,
    PAYMENT_DETAILS_DY,
    PAYMENT_GAP,
    PAYMENT_UNDERLINE_W,
    QUOTE_BAND_DY,
    QUOTE_BAND_MIN_H,
    QUOTE_INSET,
    QUOTE_TEXT_DY,
    ROW_BOTTOM_PAD,
    ROW_DIVIDER_UP,
    ROW_PITCH,
    SIGNATURE_FOR_DY,
    SIGNATURE_NAME_DY,
    SLOGAN_Y,
    STAMP_DY,
    STAMP_RIGHT_INSET,
    STAMP_SIZE,
    SUMMARY_ROW_H,
    SUMMARY_RULE_DY,
    TABLE_HEADER_H,
    TABLE_HEADER_TEXT_DY,
    THANKS_DY,
    THANKS_RULE_DY,
    TITLE_BOX_H,
    TITLE_DETAILS_DY,
    TITLE_DETAILS_LINE_H,
    TITLE_TEXT_DY,
    TOTAL_BANNER_W,
    TOTALS_GAP,
)
from .text_flow import add_wrapped_text, wrap_lines
from .totals import DerivedTotals
from .view_model import CompanyProfile, InvoiceConfiguration, InvoiceViewModel, LineItem, PaymentDetails

Color = Tuple[int, int, int]


class DrawingCanvas(Protocol):
    page_width: float
    page_height: float

    def add_page(self) -> None:
        ...

    def set_font(self, size: float, bold: bool = False, italic: bool = False) -> None:
        ...

    def set_text_color(self, color: Color) -> None:
        ...

    def set_fill_color(self, color: Color) -> None:
        ...

    def set_draw_color(self, color: Color) -> None:
        ...

    def text_width(self, text: str) -> float:
        ...

    def draw_text(self, x: float, y: float, text: str) -> None:
        ...

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        ...

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        ...

    def image(self, handle: ImageHandle, x: float, y: float, width: float, height: float) -> None:
        ...


@dataclass(frozen=True)
class SectionPositions:
    current_y: float
    page_width: float = PAGE_W
    page_height: float = PAGE_H
    margin: float = MARGIN

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def right(self) -> float:
        return self.page_width - self.margin

    @property
    def bottom(self) -> float:
        return self.page_height - self.margin

    def advance(self, dy: float) -> "SectionPositions":
        return replace(self, current_y=self.current_y + dy)

    def moved_to(self, y: float) -> "SectionPositions":
        return replace(self, current_y=y)

    def fits(self, height: float) -> bool:
        return self.current_y + height <= self.bottom


@dataclass(frozen=True)
class TableColumns:
    item_x: float
    item_w: float
    desc_x: float
    desc_w: float
    amount_x: float
    amount_right: float

    @classmethod
    def for_positions(cls, positions: SectionPositions) -> "TableColumns":
        item_col = positions.content_width * ITEM_COL_RATIO
        desc_col = positions.content_width * DESC_COL_RATIO
        return cls(
            item_x=positions.margin + CELL_PAD,
            item_w=item_col - 2 * CELL_PAD,
            desc_x=positions.margin + item_col + CELL_PAD,
            desc_w=desc_col - 2 * CELL_PAD,
            amount_x=positions.margin + item_col + desc_col + CELL_PAD,
            amount_right=positions.right - CELL_PAD,
        )


def hex_to_rgb(value: str, default: Color = COLOR_ACCENT) -> Color:
    raw = (value or "").strip().lstrip("#")
    if len(raw) == 3:
        raw = "".join(ch * 2 for ch in raw)
    if len(raw) != 6:
        return default
    try:
        return (int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16))
    except ValueError:
        return default


def percent_label(value: Any) -> str:
    return f"{to_decimal(value).normalize():f}"


def ensure_space(canvas: DrawingCanvas, positions: SectionPositions, height: float) -> SectionPositions:
    """Start a new page when the next block of the given height would cross the bottom margin."""
    if positions.fits(height):
        return positions
    canvas.add_page()
    return positions.moved_to(positions.margin)


def draw_right_aligned(canvas: DrawingCanvas, right: float, y: float, text: str) -> None:
    canvas.draw_text(right - canvas.text_width(text), y, text)


def add_header_section(
    canvas: DrawingCanvas,
    company: CompanyProfile,
    positions: SectionPositions,
    logo: Optional[ImageHandle],
    accent: Color,
) -> None:
    top = positions.current_y
    canvas.set_fill_color(accent)
    canvas.fill_rect(0, top, positions.page_width, ACCENT_BAR_H)

    if logo is not None:
        canvas.image(logo, positions.margin, top + LOGO_Y, LOGO_W, LOGO_H)
    if company.slogan:
        canvas.set_font(FONT_SIZE_NORMAL)
        canvas.set_text_color(COLOR_SLOGAN)
        canvas.draw_text(positions.margin, top + SLOGAN_Y, company.slogan)

    # Contact lines break on literal newlines only.
    canvas.set_font(FONT_SIZE_NORMAL)
    canvas.set_text_color(COLOR_TEXT)
    for index, line in enumerate(company.contact_block().split("\n")):
        draw_right_aligned(canvas, positions.right, top + COMPANY_INFO_Y + index * COMPANY_LINE_H, line)

    canvas.set_draw_color(COLOR_RULE)
    canvas.line(positions.margin, top + HEADER_RULE_Y, positions.right, top + HEADER_RULE_Y)


def title_details(invoice: InvoiceViewModel) -> List[Tuple[str, str]]:
    details = [
        ("Date", format_date(invoice.date)),
        ("Invoice No", invoice.invoice_number),
    ]
    if invoice.due_date:
        details.append(("Due Date", format_date(invoice.due_date)))
    if invoice.currency != DEFAULT_CURRENCY:
        details.append(("Currency", invoice.currency))
    return details


def add_invoice_title_section(
    canvas: DrawingCanvas,
    invoice: InvoiceViewModel,
    positions: SectionPositions,
) -> None:
    top = positions.current_y
    canvas.set_fill_color(COLOR_PANEL)
    canvas.fill_rect(positions.margin, top, positions.content_width, TITLE_BOX_H)

    canvas.set_font(FONT_SIZE_TITLE)
    canvas.set_text_color(COLOR_MUTED)
    canvas.draw_text(positions.margin + CELL_PAD, top + TITLE_TEXT_DY, "INVOICE")

    canvas.set_text_color(COLOR_TEXT)
    value_right = positions.right - CELL_PAD
    for index, (label, value) in enumerate(title_details(invoice)):
        y = top + TITLE_DETAILS_DY + index * TITLE_DETAILS_LINE_H
        canvas.set_font(FONT_SIZE_NORMAL)
        value_x = value_right - canvas.text_width(value)
        canvas.draw_text(value_x, y, value)
        canvas.set_font(FONT_SIZE_NORMAL, bold=True)
        label_text = f"{label}: "
        canvas.draw_text(value_x - canvas.text_width(label_text), y, label_text)


def client_detail_lines(invoice: InvoiceViewModel) -> List[str]:
    customer = invoice.customer
    lines = [value for value in (customer.email, customer.phone) if value]
    lines.extend(customer.address_lines)
    return lines


def client_block_height(invoice: InvoiceViewModel) -> float:
    """Height of the bill-to block; grows past the default only for long contact details."""
    lines = len(client_detail_lines(invoice))
    needed = CLIENT_NAME_DY + lines * CLIENT_LINE_H + CLIENT_RULE_GAP + CLIENT_RULE_PAD
    return max(CLIENT_BLOCK_H, needed)


def add_client_section(
    canvas: DrawingCanvas,
    invoice: InvoiceViewModel,
    positions: SectionPositions,
    accent: Color,
) -> None:
    top = positions.current_y
    canvas.set_fill_color(accent)
    canvas.fill_rect(positions.margin, top, CHIP_W, CHIP_H)
    canvas.set_text_color(COLOR_WHITE)
    canvas.set_font(FONT_SIZE_NORMAL, bold=True)
    canvas.draw_text(positions.margin + CELL_PAD, top + CHIP_TEXT_DY, "BILL TO")

    canvas.set_text_color(COLOR_TEXT)
    y = top + CLIENT_NAME_DY
    if invoice.customer.name:
        canvas.set_font(FONT_SIZE_TABLE, bold=True)
        canvas.draw_text(positions.margin, y, invoice.customer.name)

    canvas.set_font(FONT_SIZE_NORMAL)
    for line in client_detail_lines(invoice):
        y += CLIENT_LINE_H
        canvas.draw_text(positions.margin, y, line)

    rule_y = top + client_block_height(invoice) - CLIENT_RULE_PAD
    canvas.set_draw_color(COLOR_RULE)
    canvas.line(positions.margin, rule_y, positions.right, rule_y)


def draw_table_header(canvas: DrawingCanvas, positions: SectionPositions, columns: TableColumns) -> float:
    """Draw the column header row and return the baseline of the first item row."""
    top = positions.current_y
    canvas.set_fill_color(COLOR_PANEL)
    canvas.fill_rect(positions.margin, top, positions.content_width, TABLE_HEADER_H)
    canvas.set_text_color(COLOR_MUTED)
    canvas.set_font(FONT_SIZE_TABLE)
    text_y = top + TABLE_HEADER_TEXT_DY
    canvas.draw_text(columns.item_x, text_y, "ITEM")
    canvas.draw_text(columns.desc_x, text_y, "DESCRIPTION")
    canvas.draw_text(columns.amount_x, text_y, "AMOUNT")
    canvas.set_draw_color(COLOR_RULE)
    canvas.line(positions.margin, top + TABLE_HEADER_H, positions.right, top + TABLE_HEADER_H)
    return top + FIRST_ROW_DY


def bulleted(text: str) -> str:
    return f"• {text}"


def measure_item_height(canvas: DrawingCanvas, item: LineItem, columns: TableColumns) -> float:
    canvas.set_font(FONT_SIZE_TABLE, bold=True)
    name_lines = len(wrap_lines(canvas, item.display_name, columns.item_w))
    canvas.set_font(FONT_SIZE_NORMAL)
    desc_lines = len(wrap_lines(canvas, item.description, columns.desc_w))
    canvas.set_font(FONT_SIZE_SPEC)
    for spec in item.specs:
        desc_lines += len(wrap_lines(canvas, bulleted(spec), columns.desc_w))
    return max(name_lines, desc_lines, 1) * LINE_H


def row_height(canvas: DrawingCanvas, item: LineItem, columns: TableColumns, measure: bool) -> float:
    if not measure:
        return ROW_PITCH
    return max(ROW_PITCH, measure_item_height(canvas, item, columns) + ROW_BOTTOM_PAD)


def draw_item_row(
    canvas: DrawingCanvas,
    item: LineItem,
    y: float,
    currency: str,
    columns: TableColumns,
) -> None:
    canvas.set_text_color(COLOR_TEXT)
    canvas.set_font(FONT_SIZE_TABLE, bold=True)
    add_wrapped_text(canvas, item.display_name, columns.item_x, y, columns.item_w, LINE_H)

    canvas.set_font(FONT_SIZE_NORMAL)
    desc_end = add_wrapped_text(canvas, item.description, columns.desc_x, y, columns.desc_w, LINE_H)
    if item.specs:
        canvas.set_font(FONT_SIZE_SPEC)
        canvas.set_text_color(COLOR_MUTED)
        for spec in item.specs:
            desc_end = add_wrapped_text(
                canvas, bulleted(spec), columns.desc_x, desc_end, columns.desc_w, LINE_H
            )

    canvas.set_font(FONT_SIZE_TABLE)
    canvas.set_text_color(COLOR_TEXT)
    draw_right_aligned(canvas, columns.amount_right, y, format_currency(item.amount, currency))


def summary_rows(invoice: InvoiceViewModel, totals: DerivedTotals) -> List[Tuple[str, str]]:
    currency = invoice.currency
    rows = [("SUB TOTAL", format_currency(totals.subtotal, currency))]
    if whole_units(totals.tax_amount) > 0:
        rows.append(
            (f"TAX ({percent_label(invoice.tax_rate)}%)", format_currency(totals.tax_amount, currency))
        )
    if whole_units(totals.discount_amount) > 0:
        rows.append(
            (
                f"DISCOUNT ({percent_label(invoice.discount_percent)}%)",
                format_currency(-totals.discount_amount, currency),
            )
        )
    return rows


def add_invoice_table(
    canvas: DrawingCanvas,
    invoice: InvoiceViewModel,
    totals: DerivedTotals,
    positions: SectionPositions,
    measure_row_height: bool = False,
) -> SectionPositions:
    """Draw the item rows and summary rows; rows that would cross the bottom margin move to a new page.

    With the default fixed row pitch, names or descriptions that wrap past
    the pitch run into the next row; ``measure_row_height`` grows the row to
    fit its wrapped text instead.
    """
    columns = TableColumns.for_positions(positions)
    row_y = draw_table_header(canvas, positions, columns)

    items = invoice.visible_items
    for index, item in enumerate(items):
        height = row_height(canvas, item, columns, measure_row_height)
        if row_y + height > positions.bottom:
            canvas.add_page()
            row_y = draw_table_header(canvas, positions.moved_to(positions.margin), columns)

        draw_item_row(canvas, item, row_y, invoice.currency, columns)
        if index < len(items) - 1:
            divider_y = row_y + height - ROW_DIVIDER_UP
            canvas.set_draw_color(COLOR_RULE)
            canvas.line(positions.margin, divider_y, positions.right, divider_y)
        row_y += height

    rows = summary_rows(invoice, totals)
    needed = (len(rows) - 1) * SUMMARY_ROW_H + SUMMARY_RULE_DY
    positions = ensure_space(canvas, positions.moved_to(row_y - ITEMS_END_UP), needed)

    y = positions.current_y
    canvas.set_font(FONT_SIZE_TABLE)
    canvas.set_text_color(COLOR_TEXT)
    for index, (label, value) in enumerate(rows):
        if index:
            y += SUMMARY_ROW_H
        canvas.draw_text(positions.margin + CELL_PAD, y, label)
        draw_right_aligned(canvas, columns.amount_right, y, value)

    rule_y = y + SUMMARY_RULE_DY
    canvas.set_draw_color(COLOR_RULE)
    canvas.line(positions.margin, rule_y, positions.right, rule_y)
    return positions.moved_to(rule_y)


def add_total_section(
    canvas: DrawingCanvas,
    invoice: InvoiceViewModel,
    totals: DerivedTotals,
    positions: SectionPositions,
    accent: Color,
) -> SectionPositions:
    words = convert_number_to_words(totals.total, invoice.currency)
    words_w = positions.content_width - TOTAL_BANNER_W - BANNER_GAP
    text_w = words_w - 2 * CELL_PAD
    canvas.set_font(FONT_SIZE_NORMAL)
    banner_h = max(BANNER_MIN_H, len(wrap_lines(canvas, words, text_w)) * LINE_H + BANNER_TEXT_PAD)

    positions = ensure_space(
        canvas, positions, TOTALS_GAP + BANNER_TOP_DY + banner_h + BANNER_RULE_GAP
    )
    y = positions.current_y + TOTALS_GAP
    top = y + BANNER_TOP_DY

    canvas.set_fill_color(COLOR_MUTED)
    canvas.fill_rect(positions.margin, top, words_w, banner_h)
    canvas.set_text_color(COLOR_WHITE)
    add_wrapped_text(canvas, words, positions.margin + CELL_PAD, y + BANNER_TEXT_DY, text_w, LINE_H)

    canvas.set_fill_color(accent)
    canvas.fill_rect(positions.right - TOTAL_BANNER_W, top, TOTAL_BANNER_W, banner_h)
    canvas.set_font(FONT_SIZE_TABLE, bold=True)
    draw_right_aligned(
        canvas,
        positions.right - CELL_PAD,
        y + BANNER_TEXT_DY,
        format_currency(totals.total, invoice.currency),
    )

    rule_y = top + banner_h + BANNER_RULE_GAP
    canvas.set_draw_color(COLOR_RULE)
    canvas.line(positions.margin, rule_y, positions.right, rule_y)
    return positions.moved_to(rule_y)


def payment_lines(details: PaymentDetails) -> List[str]:
    return [
        f"Account Holder: {details.account_holder}",
        f"Bank Name: {details.bank_name}",
        f"Account Number: {details.account_number}",
        f"IFSC: {details.ifsc}",
        f"Branch: {details.branch}",
    ]


def add_payment_section(
    canvas: DrawingCanvas,
    invoice: InvoiceViewModel,
    company: CompanyProfile,
    positions: SectionPositions,
    stamp: Optional[ImageHandle],
) -> SectionPositions:
    positions = ensure_space(canvas, positions, PAYMENT_GAP + PAYMENT_BLOCK_H)
    y = positions.current_y + PAYMENT_GAP

    canvas.set_text_color(COLOR_TEXT)
    canvas.set_font(FONT_SIZE_TABLE, bold=True)
    canvas.draw_text(positions.margin, y, "Payment Account Details")
    canvas.set_draw_color(COLOR_TEXT)
    canvas.line(positions.margin, y + 2, positions.margin + PAYMENT_UNDERLINE_W, y + 2)

    canvas.set_font(FONT_SIZE_NORMAL)
    for index, line in enumerate(payment_lines(invoice.payment_details)):
        canvas.draw_text(positions.margin, y + PAYMENT_DETAILS_DY + index * LINE_H, line)

    draw_right_aligned(canvas, positions.right, y + SIGNATURE_FOR_DY, f"For {company.name},")
    canvas.set_font(FONT_SIZE_NORMAL, bold=True)
    draw_right_aligned(canvas, positions.right, y + SIGNATURE_NAME_DY, invoice.created_by)

    if stamp is not None:
        canvas.image(stamp, positions.right - STAMP_RIGHT_INSET, y + STAMP_DY, STAMP_SIZE, STAMP_SIZE)

    end_y = y + PAYMENT_BLOCK_H
    canvas.set_draw_color(COLOR_RULE)
    canvas.line(positions.margin, end_y, positions.right, end_y)
    return positions.moved_to(end_y)


def add_footer_section(
    canvas: DrawingCanvas,
    config: InvoiceConfiguration,
    notes: Sequence[str],
    positions: SectionPositions,
    accent: Color,
) -> SectionPositions:
    quote_w = positions.content_width - 2 * QUOTE_INSET
    notes_w = positions.content_width - 2 * NOTES_INSET

    canvas.set_font(FONT_SIZE_NORMAL, italic=True)
    quote_lines = max(1, len(wrap_lines(canvas, config.footer_text, quote_w)))
    quote_h = max(QUOTE_BAND_MIN_H, QUOTE_TEXT_DY + quote_lines * LINE_H)

    canvas.set_font(FONT_SIZE_NORMAL)
    note_lines = sum(max(1, len(wrap_lines(canvas, bulleted(note), notes_w))) for note in notes)
    notes_h = NOTES_TEXT_DY + (max(note_lines, 1) - 1) * LINE_H + NOTES_BOTTOM_PAD

    positions = ensure_space(canvas, positions, QUOTE_BAND_DY + quote_h + NOTES_BAND_GAP + notes_h)
    top = positions.current_y

    if config.thank_you_text:
        canvas.set_font(FONT_SIZE_THANKS)
        canvas.set_text_color(COLOR_TEXT)
        width = canvas.text_width(config.thank_you_text)
        canvas.draw_text((positions.page_width - width) / 2.0, top + THANKS_DY, config.thank_you_text)
    canvas.set_draw_color(COLOR_RULE)
    canvas.line(positions.margin, top + THANKS_RULE_DY, positions.right, top + THANKS_RULE_DY)

    quote_top = top + QUOTE_BAND_DY
    canvas.set_fill_color(COLOR_MUTED)
    canvas.fill_rect(positions.margin, quote_top, positions.content_width, quote_h)
    canvas.set_text_color(COLOR_WHITE)
    canvas.set_font(FONT_SIZE_NORMAL, italic=True)
    add_wrapped_text(
        canvas,
        config.footer_text,
        positions.margin + QUOTE_INSET,
        quote_top + QUOTE_TEXT_DY,
        quote_w,
        LINE_H,
        align="center",
    )

    notes_top = quote_top + quote_h + NOTES_BAND_GAP
    canvas.set_fill_color(accent)
    canvas.fill_rect(positions.margin, notes_top, positions.content_width, notes_h)
    canvas.set_font(FONT_SIZE_TABLE, bold=True)
    canvas.draw_text(positions.margin + CELL_PAD, notes_top + NOTES_LABEL_DY, "Note:")

    canvas.set_font(FONT_SIZE_NORMAL)
    y = notes_top + NOTES_TEXT_DY
    for note in notes:
        y = add_wrapped_text(canvas, bulleted(note), positions.margin + NOTES_INSET, y, notes_w, LINE_H)
    return positions.moved_to(notes_top + notes_h)
