"""
Supported currencies and their simulated rates relative to USD.

The table is static and loaded at import time. Rates are units of the
currency per 1 USD.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from openfx.errors import UnsupportedCurrencyPair


@dataclass(frozen=True)
class Currency:
    code: str
    name: str
    symbol: str
    flag: str
    rate: Decimal


CURRENCIES: tuple[Currency, ...] = (
    Currency("USD", "US Dollar", "$", "US", Decimal("1")),
    Currency("EUR", "Euro", "€", "EU", Decimal("0.92")),
    Currency("GBP", "British Pound", "£", "GB", Decimal("0.79")),
    Currency("JPY", "Japanese Yen", "¥", "JP", Decimal("149.5")),
    Currency("CAD", "Canadian Dollar", "C$", "CA", Decimal("1.36")),
    Currency("AUD", "Australian Dollar", "A$", "AU", Decimal("1.53")),
    Currency("CHF", "Swiss Franc", "CHF", "CH", Decimal("0.88")),
    Currency("INR", "Indian Rupee", "₹", "IN", Decimal("83.12")),
    Currency("SGD", "Singapore Dollar", "S$", "SG", Decimal("1.34")),
    Currency("NGN", "Nigerian Naira", "₦", "NG", Decimal("1550.0")),
)

_BY_CODE: dict[str, Currency] = {c.code: c for c in CURRENCIES}


def get_currency(code: str) -> Currency | None:
    """Look up a currency by its code (exact match, e.g. ``"EUR"``)."""
    return _BY_CODE.get(code)


def is_supported(code: str) -> bool:
    return code in _BY_CODE


def get_rate(code: str) -> Decimal:
    """Return units of *code* per 1 USD, or raise UnsupportedCurrencyPair."""
    currency = _BY_CODE.get(code)
    if currency is None:
        raise UnsupportedCurrencyPair()
    return currency.rate


def format_amount(amount: float | Decimal, code: str) -> str:
    """
    Format *amount* for display, e.g. ``format_amount(1234.5, "EUR")`` → ``"€1,234.50"``.

    Unknown codes fall back to the bare two-decimal figure.
    """
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    currency = _BY_CODE.get(code)
    if currency is None:
        return f"{value:.2f}"
    sign = "-" if value < 0 else ""
    return f"{sign}{currency.symbol}{abs(value):,.2f}"
