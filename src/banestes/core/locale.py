"""Brazilian locale value parsing and formatting.

Every currency/date/integer field coming from the spreadsheet feeds goes
through these helpers, and so does every place that renders those values,
so the list, detail and CLI views never disagree about a value.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, Overflow, ROUND_HALF_UP, localcontext
from typing import Any, Optional

UNAVAILABLE = "informação indisponível"
UNKNOWN_DATE = date(1900, 1, 1)

CENTS = Decimal("0.01")

_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%Y/%m/%d")


def _clean_currency(raw: str) -> str:
    """Strip symbol and thousands separators, use '.' as the decimal mark."""
    return raw.replace("R$", "").replace(".", "").replace(",", ".", 1).strip()


def parse_currency(raw: Any) -> Optional[Decimal]:
    """Parse a currency value such as ``"R$ 1.234,56"``.

    Args:
        raw: Text from the feed, or an already numeric value

    Returns:
        Decimal value, or None when the value is missing or not a number.
        Callers decide the default.

    Examples:
        >>> parse_currency("R$ 1.234,56")
        Decimal('1234.56')
        >>> parse_currency(1234.56)
        Decimal('1234.56')
        >>> parse_currency("abc") is None
        True
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else None
    if isinstance(raw, (int, float)):
        value = Decimal(str(raw))
        return value if value.is_finite() else None
    if not isinstance(raw, str) or not raw:
        return None

    try:
        value = Decimal(_clean_currency(raw))
    except InvalidOperation:
        return None

    if not value.is_finite():
        return None
    return value


def parse_int(raw: Any, default: int = 0) -> int:
    """Parse an integer field such as an agency code."""
    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw
    if raw is None:
        return default

    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        return default

    if not value.is_finite() or value != value.to_integral_value():
        return default
    return int(value)


def parse_date(raw: Any) -> date:
    """Parse an ISO-like date, falling back to ``UNKNOWN_DATE``.

    The fallback sorts before every known date.
    """
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return UNKNOWN_DATE

    text = raw.strip()
    # Drop a time part: "2020-01-31T10:00:00" or "2020-01-31 10:00:00"
    for sep in ("T", " "):
        if sep in text:
            text = text.split(sep, 1)[0]
            break

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return UNKNOWN_DATE


def format_money(value: Any) -> str:
    """Format a value as Brazilian currency (``R$ 1.234,56``).

    Strings are cleaned with the same rule as ``parse_currency``. Missing or
    non-numeric input renders as ``UNAVAILABLE``.
    """
    amount = parse_currency(value)
    if amount is None:
        return UNAVAILABLE

    # Precision must cover every integer digit plus the cents
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        try:
            amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
        except (InvalidOperation, Overflow):
            return UNAVAILABLE
        sign = "-" if amount < 0 else ""
        text = f"{abs(amount):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{sign}R$ {text}"


def format_date(value: Optional[date], missing: str = "Não informada") -> str:
    """Format a date as ``DD/MM/YYYY``; the unknown-date sentinel renders as ``missing``."""
    if value is None or value == UNKNOWN_DATE:
        return missing
    return value.strftime("%d/%m/%Y")
