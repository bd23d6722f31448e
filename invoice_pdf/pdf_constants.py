"""Page geometry, colors and font sizes for the invoice layout (millimetres, top-left origin)."""

from __future__ import annotations

PAGE_FORMAT = "A4"
PAGE_W = 210.0
PAGE_H = 297.0
MARGIN = 12.0
CONTENT_W = PAGE_W - 2 * MARGIN
CONTENT_BOTTOM = PAGE_H - MARGIN

COLOR_ACCENT = (0, 179, 179)
COLOR_PANEL = (249, 249, 249)
COLOR_MUTED = (102, 102, 102)
COLOR_SLOGAN = (85, 85, 85)
COLOR_RULE = (221, 221, 221)
COLOR_TEXT = (0, 0, 0)
COLOR_WHITE = (255, 255, 255)

FONT_SIZE_TITLE = 24
FONT_SIZE_THANKS = 14
FONT_SIZE_TABLE = 11
FONT_SIZE_NORMAL = 10
FONT_SIZE_SPEC = 9

LINE_H = 4.5
RULE_WIDTH = 0.3
CELL_PAD = 4.0

# Header, from the top of the page
ACCENT_BAR_H = 6.0
LOGO_Y = 10.0
LOGO_W = 36.0
LOGO_H = 13.0
SLOGAN_Y = 28.0
COMPANY_INFO_Y = 12.0
COMPANY_LINE_H = 4.0
HEADER_RULE_Y = 32.0
HEADER_BLOCK_H = 36.0

# Title block, relative to its top
TITLE_BOX_H = 16.0
TITLE_TEXT_DY = 12.0
TITLE_DETAILS_DY = 4.5
TITLE_DETAILS_LINE_H = 3.8
TITLE_BLOCK_H = 19.0

# Bill-to block, relative to its top
CHIP_W = 22.0
CHIP_H = 6.0
CHIP_TEXT_DY = 4.3
CLIENT_NAME_DY = 11.0
CLIENT_LINE_H = 4.0
CLIENT_RULE_GAP = 2.0
CLIENT_RULE_PAD = 3.0
# Minimum height; four detail lines fit without growing the block.
CLIENT_BLOCK_H = 32.0

# Item table
TABLE_START_Y_FIRST = HEADER_BLOCK_H + TITLE_BLOCK_H + CLIENT_BLOCK_H
TABLE_START_Y_CONT = MARGIN
TABLE_HEADER_H = 9.0
TABLE_HEADER_TEXT_DY = 6.0
FIRST_ROW_DY = 15.0
ROW_PITCH = 20.0
ROW_DIVIDER_UP = 5.0
ROW_BOTTOM_PAD = 8.0
ITEM_COL_RATIO = 0.40
DESC_COL_RATIO = 0.40
ITEMS_END_UP = 4.0
SUMMARY_ROW_H = 7.0
SUMMARY_RULE_DY = 4.0

# Totals block
TOTALS_GAP = 12.0
TOTAL_BANNER_W = 46.0
BANNER_GAP = 2.0
BANNER_MIN_H = 8.0
BANNER_TOP_DY = -6.0
BANNER_TEXT_DY = -0.5
BANNER_TEXT_PAD = 3.5
BANNER_RULE_GAP = 4.0

# Payment / signature block
PAYMENT_GAP = 9.0
PAYMENT_UNDERLINE_W = 55.0
PAYMENT_DETAILS_DY = 7.0
SIGNATURE_FOR_DY = 4.0
SIGNATURE_NAME_DY = 11.0
STAMP_DY = 13.0
STAMP_SIZE = 22.0
STAMP_RIGHT_INSET = 30.0
PAYMENT_BLOCK_H = 38.0

# Footer block
THANKS_DY = 7.0
THANKS_RULE_DY = 10.0
QUOTE_BAND_DY = 13.0
QUOTE_BAND_MIN_H = 12.0
QUOTE_TEXT_DY = 7.5
QUOTE_INSET = 10.0
NOTES_BAND_GAP = 3.0
NOTES_LABEL_DY = 6.0
NOTES_TEXT_DY = 11.0
NOTES_INSET = 8.0
NOTES_BOTTOM_PAD = 5.0

# Page space needed below the last item row for the summary rows, totals,
# payment block and a footer with a one-line quote and two one-line notes.
TRAILER_H = 128.0
