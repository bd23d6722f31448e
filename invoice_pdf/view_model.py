"""Normalized, render-ready invoice data built from raw persisted records."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .formatting import currency_symbol, normalize_currency, shift_date, to_decimal
from .totals import DerivedTotals, compute_totals

INVOICE_STATUSES = ("draft", "pending", "paid", "overdue")
UNNAMED_ITEM = "Unnamed Item"
DEFAULT_CREATOR_NAME = "RICHU EAPEN GEORGE"
DEFAULT_NOTES: Tuple[str, ...] = (
    "Upgrading the current cloud hosting service plans are extra payable as per the client requirements.",
    "Server downtime may occur rarely during scheduled maintenances or damages due to natural disasters.",
)
NO_NOTES_PLACEHOLDER = "No additional notes for this invoice."

NotesField = Union[None, str, Sequence[str]]


@dataclass(frozen=True)
class PaymentDetails:
    account_holder: str
    bank_name: str
    account_number: str
    ifsc: str
    branch: str


DEFAULT_PAYMENT_DETAILS = PaymentDetails(
    account_holder="Jithin Jacob Issac",
    bank_name="Federal Bank",
    account_number="99980111697400",
    ifsc="FDRL0001443",
    branch="Mallappally",
)


@dataclass(frozen=True)
class Customer:
    name: str
    email: str = ""
    phone: str = ""
    address: str = ""

    @property
    def address_lines(self) -> List[str]:
        return [part.strip() for part in self.address.split(",") if part.strip()]


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: int
    price: Decimal
    name: Optional[str] = None
    specs: Tuple[str, ...] = ()

    @property
    def display_name(self) -> str:
        name = (self.name or "").strip()
        return name or UNNAMED_ITEM

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.price


@dataclass(frozen=True)
class CompanyProfile:
    name: str = "Techius Solutions"
    address: str = "Mallappally, Kerala"
    registration_number: str = "KL11D0004260"
    phone: str = "+91-9961560545"
    website: str = "www.techiussolutions.in"
    email: str = "info@techiussolutions.in"
    slogan: str = "EXPERIENCE THE DIGITAL INNOVATION"
    logo: Optional[Any] = None
    stamp: Optional[Any] = None

    def contact_block(self) -> str:
        return (
            f"{self.name}, {self.address}\n"
            f"UAM No: {self.registration_number}\n"
            f"Phone: {self.phone}\n"
            f"Web: {self.website}\n"
            f"E-mail: {self.email}"
        )


@dataclass(frozen=True)
class InvoiceConfiguration:
    thank_you_text: str = "Thank you for your business!"
    footer_text: str = (
        "Logic will get you from A to B. Imagination will take you everywhere. - Albert Einstein"
    )
    # None means "not configured"; an empty tuple means "configured as empty".
    notes: Optional[Tuple[str, ...]] = None
    default_tax_rate: Decimal = Decimal(10)
    accent_color: str = "#00b3b3"
    measure_row_height: bool = False
    # Prepended to purely numeric invoice numbers.
    invoice_prefix: str = ""
    # Due date offset from the issue date when a record has none.
    default_due_days: Optional[int] = None


@dataclass(frozen=True)
class InvoiceViewModel:
    invoice_number: str
    customer: Customer
    date: str
    currency: str = "INR"
    items: Tuple[LineItem, ...] = ()
    due_date: Optional[str] = None
    discount_percent: Decimal = Decimal(0)
    tax_enabled: bool = True
    tax_rate: Decimal = Decimal(10)
    notes: Tuple[str, ...] = ()
    payment_details: PaymentDetails = DEFAULT_PAYMENT_DETAILS
    created_by: str = DEFAULT_CREATOR_NAME
    status: str = "draft"
    currency_symbol: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if not self.currency_symbol:
            object.__setattr__(self, "currency_symbol", currency_symbol(self.currency))

    @property
    def visible_items(self) -> List[LineItem]:
        return [item for item in self.items if item.quantity > 0]

    def totals(self) -> DerivedTotals:
        return compute_totals(self.items, self.discount_percent, self.tax_enabled, self.tax_rate)


def _pick(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return default


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _to_int(value: Any) -> int:
    try:
        return int(to_decimal(value))
    except (ValueError, ArithmeticError):
        return 0


def _to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def normalize_notes(raw: NotesField) -> Tuple[str, ...]:
    """Resolve a string, newline-delimited string or list of strings into note lines."""
    if raw is None:
        return ()
    if isinstance(raw, str):
        chunks = [raw]
    elif isinstance(raw, (list, tuple)):
        chunks = [str(entry) for entry in raw if entry is not None]
    else:
        chunks = [str(raw)]
    lines: List[str] = []
    for chunk in chunks:
        lines.extend(line.strip() for line in chunk.split("\n") if line.strip())
    return tuple(lines)


def resolve_notes(invoice_notes: Sequence[str], config: InvoiceConfiguration) -> Tuple[str, ...]:
    """Invoice notes win over configured notes, which win over the built-in defaults."""
    if invoice_notes:
        return tuple(invoice_notes)
    notes = DEFAULT_NOTES if config.notes is None else tuple(config.notes)
    return notes or (NO_NOTES_PLACEHOLDER,)


def build_line_item(raw: Mapping[str, Any]) -> LineItem:
    specs = raw.get("specs") or ()
    if isinstance(specs, str):
        specs = specs.split("\n")
    return LineItem(
        description=_text(raw.get("description")),
        quantity=_to_int(raw.get("quantity")),
        price=to_decimal(raw.get("price")),
        name=_text(raw.get("name")) or None,
        specs=tuple(_text(spec) for spec in specs if _text(spec)),
    )


def build_customer(raw: Any) -> Customer:
    if isinstance(raw, Customer):
        return raw
    raw = raw if isinstance(raw, Mapping) else {}
    return Customer(
        name=_text(raw.get("name")),
        email=_text(raw.get("email")),
        phone=_text(raw.get("phone")),
        address=_text(raw.get("address")),
    )


def build_payment_details(raw: Any) -> PaymentDetails:
    if isinstance(raw, PaymentDetails):
        return raw
    if not isinstance(raw, Mapping) or not any(_text(value) for value in raw.values()):
        return DEFAULT_PAYMENT_DETAILS
    return PaymentDetails(
        account_holder=_text(_pick(raw, "account_holder", "accountHolder")),
        bank_name=_text(_pick(raw, "bank_name", "bankName")),
        account_number=_text(_pick(raw, "account_number", "accountNumber")),
        ifsc=_text(_pick(raw, "ifsc", "routing_code", "routingCode")),
        branch=_text(raw.get("branch")),
    )


def build_view_model(
    record: Mapping[str, Any],
    config: Optional[InvoiceConfiguration] = None,
) -> InvoiceViewModel:
    """Map an invoice record (snake_case columns or camelCase keys) to the view model."""
    config = config or InvoiceConfiguration()
    raw_items = _pick(record, "items", "invoice_items", default=[]) or []
    status = _text(record.get("status")).lower()
    tax_rate = _pick(record, "tax_rate", "taxRate")
    currency = normalize_currency(record.get("currency"))

    invoice_number = _text(_pick(record, "invoice_number", "invoiceNumber", "number"))
    if invoice_number.isdigit() and config.invoice_prefix:
        invoice_number = config.invoice_prefix + invoice_number
    issue_date = _text(record.get("date"))
    due_date = _text(_pick(record, "due_date", "dueDate")) or None
    if due_date is None and config.default_due_days is not None:
        due_date = shift_date(issue_date, config.default_due_days)

    return InvoiceViewModel(
        invoice_number=invoice_number,
        customer=build_customer(record.get("customer")),
        date=issue_date,
        due_date=due_date,
        currency=currency,
        items=tuple(build_line_item(item) for item in raw_items if isinstance(item, Mapping)),
        discount_percent=to_decimal(record.get("discount")),
        tax_enabled=_to_bool(_pick(record, "is_tax_enabled", "isTaxEnabled"), True),
        tax_rate=config.default_tax_rate if tax_rate is None else to_decimal(tax_rate),
        notes=normalize_notes(record.get("notes")),
        payment_details=build_payment_details(_pick(record, "payment_details", "paymentDetails")),
        created_by=_text(_pick(record, "created_by", "createdBy", "creator_name")) or DEFAULT_CREATOR_NAME,
        status=status if status in INVOICE_STATUSES else "draft",
    )


_COMPANY_ALIASES = {
    "registration_number": ("registration_number", "registrationNumber", "uam_number", "uamNumber"),
}
_CONFIG_ALIASES = {
    "thank_you_text": ("thank_you_text", "thankYouText", "default_notes", "defaultNotes"),
    "footer_text": ("footer_text", "footerText"),
    "default_tax_rate": ("default_tax_rate", "defaultTaxRate"),
    "accent_color": ("accent_color", "accentColor"),
    "measure_row_height": ("measure_row_height", "measureRowHeight"),
    "invoice_prefix": ("invoice_prefix", "invoicePrefix"),
    "default_due_days": ("default_due_days", "defaultDueDays"),
}


def _settings_kwargs(
    record: Mapping[str, Any],
    names: Sequence[str],
    aliases: Dict[str, Tuple[str, ...]],
) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {}
    for name in names:
        value = _pick(record, *aliases.get(name, (name,)))
        if value is not None:
            kwargs[name] = value
    return kwargs


def build_company_profile(record: Optional[Mapping[str, Any]]) -> CompanyProfile:
    if not isinstance(record, Mapping) or not record:
        return CompanyProfile()
    names = [f.name for f in fields(CompanyProfile)]
    kwargs = _settings_kwargs(record, names, _COMPANY_ALIASES)
    for name, value in list(kwargs.items()):
        if name not in ("logo", "stamp"):
            kwargs[name] = _text(value)
    return CompanyProfile(**kwargs)


def build_configuration(record: Optional[Mapping[str, Any]]) -> InvoiceConfiguration:
    if not isinstance(record, Mapping) or not record:
        return InvoiceConfiguration()
    names = list(_CONFIG_ALIASES)
    kwargs = _settings_kwargs(record, names, _CONFIG_ALIASES)
    if "default_tax_rate" in kwargs:
        kwargs["default_tax_rate"] = to_decimal(kwargs["default_tax_rate"], Decimal(10))
    if "measure_row_height" in kwargs:
        kwargs["measure_row_height"] = _to_bool(kwargs["measure_row_height"], False)
    if "default_due_days" in kwargs:
        days = _to_int(kwargs["default_due_days"])
        kwargs["default_due_days"] = days if days >= 0 else None
    for name in ("thank_you_text", "footer_text", "accent_color", "invoice_prefix"):
        if name in kwargs:
            kwargs[name] = _text(kwargs[name])
    if record.get("notes") is not None:
        kwargs["notes"] = normalize_notes(record.get("notes"))
    return InvoiceConfiguration(**kwargs)
