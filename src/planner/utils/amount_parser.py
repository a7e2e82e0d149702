"""Amount parsing utilities."""

import re
from decimal import Decimal, InvalidOperation

_CURRENCY_RE = re.compile(r"[$€£¥₹₽₺]|Ft|[A-Z]{3}")
_SPACE_RE = re.compile(r"[\s\u00a0]")
# "12,5" or "3850,50": a single comma before one or two digits
_DECIMAL_COMMA_RE = re.compile(r"^-?\d+,\d{1,2}$")


def parse_amount(text: str) -> Decimal:
    """Parse a command line amount into a Decimal.

    Accepts plain numbers, currency symbols or codes ("$12", "3850 Ft",
    "10 EUR"), thousands separators and accounting negatives ("(12.50)").
    Amounts written the way CurrencyService.format prints them
    ("3 850,50 Ft") are read back with their decimal comma.

    Raises:
        ValueError: If text is empty or not a finite number
    """
    if not text or not text.strip():
        raise ValueError("Empty amount string")

    cleaned = text.strip()
    negative = cleaned.startswith("(") and cleaned.endswith(")")
    if negative:
        cleaned = cleaned[1:-1]

    cleaned = _SPACE_RE.sub("", _CURRENCY_RE.sub("", cleaned))
    if _DECIMAL_COMMA_RE.match(cleaned):
        cleaned = cleaned.replace(",", ".")
    else:
        cleaned = cleaned.replace(",", "")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{text}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{text}'")
    return -amount if negative else amount
