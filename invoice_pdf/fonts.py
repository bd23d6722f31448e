"""Font discovery and the FPDF-backed drawing canvas."""

from __future__ import annotations

import logging
import os
import threading
from typing import List, Optional, Tuple

from fpdf import FPDF  # type: ignore

from .images import ImageHandle
from .pdf_constants import PAGE_FORMAT, RULE_WIDTH

logger = logging.getLogger(__name__)

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

Color = Tuple[int, int, int]

# Core PDF fonts are Latin-1 only.
LATIN1_FALLBACKS = str.maketrans(
    {
        "₹": "Rs.",
        "•": "-",
        "–": "-",
        "—": "-",
        "‘": "'",
        "’": "'",
        "“": '"',
        "”": '"',
    }
)


def find_font_path(env_var: str, candidates: List[str]) -> Optional[str]:
    override = os.getenv(env_var)
    if override and os.path.exists(override):
        return override

    for path in candidates:
        if os.path.exists(path):
            return path
    return None


def to_latin1(text: str) -> str:
    return text.translate(LATIN1_FALLBACKS).encode("latin-1", "replace").decode("latin-1")


FONT_INIT_LOCK = threading.Lock()


class FontManager:
    FAMILY = "InvoiceFont"
    CORE_FAMILY = "helvetica"
    BUNDLED_REGULAR = os.path.join(_PROJECT_ROOT, "fonts", "DejaVuSans.ttf")
    BUNDLED_BOLD = os.path.join(_PROJECT_ROOT, "fonts", "DejaVuSans-Bold.ttf")
    BUNDLED_ITALIC = os.path.join(_PROJECT_ROOT, "fonts", "DejaVuSans-Oblique.ttf")
    SYSTEM_REGULAR_CANDIDATES = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/dejavu/DejaVuSans.ttf",
        "/Library/Fonts/DejaVuSans.ttf",
    ]
    SYSTEM_BOLD_CANDIDATES = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
        "/Library/Fonts/DejaVuSans-Bold.ttf",
    ]
    SYSTEM_ITALIC_CANDIDATES = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Oblique.ttf",
        "/usr/share/fonts/dejavu/DejaVuSans-Oblique.ttf",
        "/Library/Fonts/DejaVuSans-Oblique.ttf",
    ]

    def __init__(self, pdf: FPDF) -> None:
        self.pdf = pdf
        self.family = self.FAMILY
        self.unicode = True
        self.has_bold = False
        self.has_italic = False

        regular_path = find_font_path(
            "INVOICE_FONT_PATH",
            [self.BUNDLED_REGULAR, *self.SYSTEM_REGULAR_CANDIDATES],
        )
        if not regular_path:
            logger.warning(
                "Unicode font not found; falling back to %s. Set INVOICE_FONT_PATH to a valid TTF file.",
                self.CORE_FAMILY,
            )
            self.family = self.CORE_FAMILY
            self.unicode = False
            self.has_bold = True
            self.has_italic = True
            return

        bold_path = find_font_path(
            "INVOICE_FONT_BOLD_PATH",
            [self.BUNDLED_BOLD, *self.SYSTEM_BOLD_CANDIDATES],
        )
        italic_path = find_font_path(
            "INVOICE_FONT_ITALIC_PATH",
            [self.BUNDLED_ITALIC, *self.SYSTEM_ITALIC_CANDIDATES],
        )

        with FONT_INIT_LOCK:
            self.pdf.add_font(self.FAMILY, "", regular_path)
            if bold_path:
                self.pdf.add_font(self.FAMILY, "B", bold_path)
                self.has_bold = True
            if italic_path:
                self.pdf.add_font(self.FAMILY, "I", italic_path)
                self.has_italic = True

    def style_for(self, bold: bool, italic: bool) -> str:
        style = ""
        if bold and self.has_bold:
            style += "B"
        # Unicode bold-italic is never registered.
        if italic and self.has_italic and (not style or not self.unicode):
            style += "I"
        return style

    def prepare(self, text: str) -> str:
        return text if self.unicode else to_latin1(text)


class PdfCanvas:
    """Drawing primitives the section builders use, backed by one FPDF document."""

    def __init__(self, pdf: Optional[FPDF] = None) -> None:
        if pdf is None:
            pdf = FPDF(orientation="P", unit="mm", format=PAGE_FORMAT)
            pdf.set_auto_page_break(False)
            pdf.add_page()
        self.pdf = pdf
        self.fonts = FontManager(pdf)
        self.bold = False
        self.set_font(10)
        self.pdf.set_line_width(RULE_WIDTH)

    @property
    def page_width(self) -> float:
        return self.pdf.w

    @property
    def page_height(self) -> float:
        return self.pdf.h

    def add_page(self) -> None:
        self.pdf.add_page()

    def set_font(self, size: float, bold: bool = False, italic: bool = False) -> None:
        self.bold = bold
        self.pdf.set_font(self.fonts.family, self.fonts.style_for(bold, italic), size)

    def set_text_color(self, color: Color) -> None:
        self.pdf.set_text_color(*color)

    def set_fill_color(self, color: Color) -> None:
        self.pdf.set_fill_color(*color)

    def set_draw_color(self, color: Color) -> None:
        self.pdf.set_draw_color(*color)

    def text_width(self, text: str) -> float:
        return self.pdf.get_string_width(self.fonts.prepare(text))

    def draw_text(self, x: float, y: float, text: str) -> None:
        prepared = self.fonts.prepare(text)
        self.pdf.text(x, y, prepared)
        if self.bold and not self.fonts.has_bold:
            self.pdf.text(x + 0.15, y, prepared)

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        self.pdf.rect(x, y, width, height, style="F")

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.pdf.line(x1, y1, x2, y2)

    def image(self, handle: ImageHandle, x: float, y: float, width: float, height: float) -> None:
        try:
            self.pdf.image(handle.stream(), x=x, y=y, w=width, h=height)
        except Exception as exc:
            logger.warning("Could not embed %s image; omitting it: %s", handle.format, exc)

    def output(self) -> bytes:
        blob = self.pdf.output()
        if isinstance(blob, (bytes, bytearray)):
            return bytes(blob)
        if isinstance(blob, str):
            try:
                return blob.encode("latin-1")
            except UnicodeEncodeError as exc:
                raise RuntimeError(
                    "PDF serialization failed due to non-Latin-1 content. "
                    "Check Unicode font configuration (INVOICE_FONT_PATH/INVOICE_FONT_BOLD_PATH)."
                ) from exc
        raise RuntimeError(f"Unexpected PDF output type: {type(blob).__name__}")
