"""Invoice totals: the single place subtotal, discount, tax and total are derived."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Union

from .formatting import to_decimal

HUNDRED = Decimal(100)


@dataclass(frozen=True)
class DerivedTotals:
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal

    @property
    def taxable_base(self) -> Decimal:
        return self.subtotal - self.discount_amount

    def as_dict(self) -> Dict[str, Union[int, float]]:
        return {
            "subtotal": json_number(self.subtotal),
            "discount_amount": json_number(self.discount_amount),
            "tax_amount": json_number(self.tax_amount),
            "total": json_number(self.total),
        }


def json_number(value: Decimal) -> Union[int, float]:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def compute_totals(
    items: Iterable[Any],
    discount_percent: Any = 0,
    tax_enabled: bool = False,
    tax_rate_percent: Any = 0,
) -> DerivedTotals:
    """Derive the invoice totals from its line items.

    Items with a quantity of zero (or less) are skipped; they stay on the
    invoice as soft-deleted rows. Rates are percentages. Nothing is validated
    here, so negative inputs give a consistent, possibly negative, result.
    """
    subtotal = Decimal(0)
    for item in items:
        quantity = to_decimal(_field(item, "quantity"))
        if quantity <= 0:
            continue
        subtotal += quantity * to_decimal(_field(item, "price"))

    discount_amount = subtotal * (to_decimal(discount_percent) / HUNDRED)
    taxable_base = subtotal - discount_amount
    tax_amount = Decimal(0)
    if tax_enabled:
        tax_amount = taxable_base * (to_decimal(tax_rate_percent) / HUNDRED)

    return DerivedTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        tax_amount=tax_amount,
        total=taxable_base + tax_amount,
    )
