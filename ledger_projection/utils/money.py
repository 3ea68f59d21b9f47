"""Money conversion at the engine boundary.

Inside the engine every amount is an int of cents. Display values (Decimal,
str, float typed by a user) are converted here and only here.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ledger_projection.config import settings
from ledger_projection.domain.exceptions import InvalidAmountError

_CENT = Decimal("0.01")


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal (None counts as zero)"""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidAmountError(f"Not a monetary value: {value!r}") from e


def to_cents(value) -> int:
    """
    Convert a display amount to integer cents, rounding half up.

    Example:
        to_cents("10.005") -> 1001
        to_cents(Decimal("1234.5")) -> 123450
    """
    amount = coerce_decimal(value)
    if not amount.is_finite():
        raise InvalidAmountError(f"Not a finite monetary value: {value!r}")
    return int((amount.quantize(_CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())


def from_cents(cents: int) -> Decimal:
    """Integer cents to a 2-place Decimal"""
    return (Decimal(cents) / 100).quantize(_CENT)


def format_cents(
    cents: int,
    symbol: str | None = None,
    decimal_separator: str | None = None,
    thousands_separator: str | None = None,
) -> str:
    """
    Render cents for display, defaulting to the configured currency style.

    Example:
        format_cents(123456) -> "R$ 1.234,56"
        format_cents(-5) -> "-R$ 0,05"
    """
    symbol = settings.currency_symbol if symbol is None else symbol
    decimal_separator = settings.decimal_separator if decimal_separator is None else decimal_separator
    thousands_separator = settings.thousands_separator if thousands_separator is None else thousands_separator

    sign = "-" if cents < 0 else ""
    units, minor = divmod(abs(cents), 100)
    grouped = f"{units:,}".replace(",", thousands_separator)
    body = f"{grouped}{decimal_separator}{minor:02d}"
    return f"{sign}{symbol} {body}" if symbol else f"{sign}{body}"
