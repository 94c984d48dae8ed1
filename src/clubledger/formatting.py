"""Display formatting for money and dates.

This is the only place amounts are rounded to currency precision.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

DEFAULT_CURRENCY_SYMBOL = "£"
DEFAULT_DATE_FORMAT = "%d/%m/%Y"

_CENTS = Decimal("0.01")


def round_currency(amount: float) -> Decimal:
    """Round to 2 decimal places, halves away from zero."""
    # str() first so 2.675 rounds as written, not as its binary approximation
    return Decimal(str(amount)).quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_currency(amount: float, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """Format an amount as e.g. ``£30.00`` (``-£5.00`` for negatives)."""
    value = round_currency(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_date(value: date | datetime | None, fmt: str = DEFAULT_DATE_FORMAT) -> str:
    """Format a date as ``DD/MM/YYYY`` by default; None renders as an empty string."""
    if value is None:
        return ""
    return value.strftime(fmt)
