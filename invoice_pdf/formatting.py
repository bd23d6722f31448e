"""Currency, date and amount-in-words formatting helpers."""

from __future__ import annotations

import re
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, List, Optional, Sequence, Tuple

from dateutil import parser as dateutil_parser

DEFAULT_CURRENCY = "INR"
SUPPORTED_CURRENCIES = ("INR", "USD", "GBP", "AUD")

# INR is not in the table on purpose: it gets the "₹ " house prefix.
CURRENCY_SYMBOLS = {"USD": "$", "GBP": "£", "AUD": "A$"}
INR_SYMBOL = "₹"

ONES = [
    "",
    "One",
    "Two",
    "Three",
    "Four",
    "Five",
    "Six",
    "Seven",
    "Eight",
    "Nine",
    "Ten",
    "Eleven",
    "Twelve",
    "Thirteen",
    "Fourteen",
    "Fifteen",
    "Sixteen",
    "Seventeen",
    "Eighteen",
    "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

INDIAN_GROUPS: Tuple[Tuple[int, str], ...] = (
    (10_000_000, "Crore"),
    (100_000, "Lakh"),
    (1_000, "Thousand"),
)
INTERNATIONAL_GROUPS: Tuple[Tuple[int, str], ...] = (
    (1_000_000, "Million"),
    (1_000, "Thousand"),
)


def to_decimal(value: Any, default: Decimal = Decimal(0)) -> Decimal:
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if value is None or isinstance(value, bool):
        return default
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    return result if result.is_finite() else default


def whole_units(value: Any) -> Decimal:
    return to_decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP)


def normalize_currency(code: Any) -> str:
    value = str(code or "").strip().upper()
    return value if value in SUPPORTED_CURRENCIES else DEFAULT_CURRENCY


def currency_symbol(code: Any) -> str:
    return CURRENCY_SYMBOLS.get(str(code or "").strip().upper(), INR_SYMBOL)


def group_digits(digits: str, indian: bool = False) -> str:
    """Insert thousands separators; Indian grouping pairs digits above the thousands."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    if not indian:
        return f"{int(digits):,}"
    groups: List[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount: Any, currency_code: Any = DEFAULT_CURRENCY) -> str:
    code = str(currency_code or "").strip().upper()
    whole = whole_units(amount)
    sign = "-" if whole < 0 else ""
    digits = str(abs(int(whole)))
    if code in CURRENCY_SYMBOLS:
        return f"{sign}{CURRENCY_SYMBOLS[code]}{group_digits(digits)}"
    return f"{sign}{INR_SYMBOL} {group_digits(digits, indian=True)}"


def format_date(value: Any) -> str:
    """Format a date as DD/MM/YYYY, returning unparseable input unchanged."""
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    raw = str(value or "").strip()
    if not raw:
        return raw
    try:
        parsed = dateutil_parser.parse(raw)
    except (ValueError, OverflowError):
        return raw
    return parsed.strftime("%d/%m/%Y")


def shift_date(value: Any, days: int) -> Optional[str]:
    """ISO date 'days' after value, or None when value does not parse."""
    raw = str(value or "").strip()
    if not raw:
        return None
    try:
        shifted = dateutil_parser.parse(raw).date() + timedelta(days=days)
    except (ValueError, OverflowError):
        return None
    return shifted.isoformat()


def spell_under_thousand(number: int) -> str:
    if number < 20:
        return ONES[number]
    if number < 100:
        ones = number % 10
        return TENS[number // 10] + (f" {ONES[ones]}" if ones else "")
    rest = number % 100
    return f"{ONES[number // 100]} Hundred" + (f" {spell_under_thousand(rest)}" if rest else "")


def spell_groups(number: int, groups: Sequence[Tuple[int, str]]) -> str:
    parts: List[str] = []
    for index, (size, name) in enumerate(groups):
        count = number // size if index == 0 else (number % groups[index - 1][0]) // size
        if not count:
            continue
        # Only the top group can exceed 999, e.g. a thousand crore.
        words = spell_groups(count, groups) if count > 999 else spell_under_thousand(count)
        parts.append(f"{words} {name}")
    remainder = number % groups[-1][0]
    if remainder:
        parts.append(spell_under_thousand(remainder))
    return " ".join(parts).strip()


def convert_number_to_words(amount: Any, currency_code: Any = DEFAULT_CURRENCY) -> str:
    number = int(whole_units(amount))
    if number == 0:
        return "Zero"

    code = normalize_currency(currency_code)
    groups = INDIAN_GROUPS if code == "INR" else INTERNATIONAL_GROUPS
    words = spell_groups(abs(number), groups)
    prefix = "Minus " if number < 0 else ""
    return f"{prefix}{words} {code} Only"


def split_lines(text: str) -> List[str]:
    if not text:
        return []
    return [line for line in text.split("\n") if line.strip() != ""]


def safe_filename(name: str) -> str:
    return re.sub(r'[\\/*?:"<>|]', "", (name or "")).strip() or "Invoice"
