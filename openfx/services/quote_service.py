"""
FX quote engine — rate lookup, fee calculation, and quote expiry.

Quotes are computed from the static currency table: the cross rate is
``destination_rate / source_rate`` and the fee is a percentage of the source
amount with a fixed floor. Issued quotes are kept in a process-local
``QuoteBook`` so a payment can be matched to its quote by id.
"""

import logging
import math
import threading
import uuid
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from openfx.config import settings
from openfx.core.clock import Clock, is_expired, system_clock, to_epoch_ms
from openfx.currencies import get_rate, is_supported
from openfx.errors import InvalidAmount, QuoteExpired, UnsupportedCurrencyPair
from openfx.schemas.quote import Quote

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CENT = Decimal("0.01")
RATE_PRECISION = Decimal("0.000001")
HUNDRED = Decimal("100")


def _to_decimal_amount(amount, max_amount: Decimal = settings.FX_MAX_AMOUNT) -> Decimal:
    """Validate and convert a user-supplied amount."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise InvalidAmount()
    if isinstance(amount, float) and not math.isfinite(amount):
        raise InvalidAmount()
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    if not value.is_finite() or value <= 0:
        raise InvalidAmount()
    if value > max_amount:
        raise InvalidAmount(f"Amount must not exceed {max_amount:,.0f}.")
    return value


def calculate_fee(
    amount: Decimal,
    fee_percent: Decimal = settings.FX_FEE_PERCENT,
    min_fee: Decimal = settings.FX_MIN_FEE,
) -> Decimal:
    """Fee = max(amount × fee_percent%, min_fee), rounded to cents."""
    fee = max(amount * fee_percent / HUNDRED, min_fee)
    return fee.quantize(CENT, rounding=ROUND_HALF_UP)


def generate_quote_id() -> str:
    return f"QT-{uuid.uuid4().hex[:12].upper()}"


def compute_quote(
    source_currency: str,
    destination_currency: str,
    amount,
    *,
    now: datetime,
    ttl_seconds: int = settings.FX_QUOTE_TTL_SECONDS,
    fee_percent: Decimal = settings.FX_FEE_PERCENT,
    min_fee: Decimal = settings.FX_MIN_FEE,
    max_amount: Decimal = settings.FX_MAX_AMOUNT,
) -> Quote:
    """
    Price *amount* of *source_currency* in *destination_currency*.

    Raises UnsupportedCurrencyPair if either code is not in the currency
    table, and InvalidAmount if *amount* is not a positive finite number
    no larger than *max_amount*.
    Apart from the quote id the result depends only on the inputs.
    """
    if not (is_supported(source_currency) and is_supported(destination_currency)):
        raise UnsupportedCurrencyPair()

    source_amount = _to_decimal_amount(amount, max_amount)

    raw_rate = get_rate(destination_currency) / get_rate(source_currency)
    fx_rate = raw_rate.quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)

    fee = calculate_fee(source_amount, fee_percent, min_fee)
    total_payable = (source_amount + fee).quantize(CENT, rounding=ROUND_HALF_UP)
    destination_amount = (source_amount * raw_rate).quantize(CENT, rounding=ROUND_HALF_UP)

    expires_at = now + timedelta(seconds=ttl_seconds)

    return Quote(
        id=generate_quote_id(),
        source_currency=source_currency,
        destination_currency=destination_currency,
        source_amount=float(source_amount),
        destination_amount=float(destination_amount),
        fx_rate=float(fx_rate),
        fee=float(fee),
        total_payable=float(total_payable),
        expires_at=to_epoch_ms(expires_at),
    )


# ---------------------------------------------------------------------------
# QuoteBook
# ---------------------------------------------------------------------------


class QuoteBook:
    """Process-local store of issued quotes, keyed by quote id."""

    def __init__(self, clock: Clock = system_clock):
        self.clock = clock
        self._quotes: dict[str, Quote] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._quotes)

    def issue(self, source_currency: str, destination_currency: str, amount) -> Quote:
        """Compute a quote at the current time and remember it."""
        quote = compute_quote(
            source_currency, destination_currency, amount, now=self.clock.now(),
        )
        self.add(quote)
        logger.info(
            "Quote %s issued: %s %s -> %s %s (fee %s, expires %d)",
            quote.id, quote.source_amount, quote.source_currency,
            quote.destination_amount, quote.destination_currency,
            quote.fee, quote.expires_at,
        )
        return quote

    def add(self, quote: Quote) -> None:
        with self._lock:
            self._quotes[quote.id] = quote

    def get(self, quote_id: str) -> Quote | None:
        with self._lock:
            return self._quotes.get(quote_id)

    def resolve(self, quote_id: str, now: datetime | None = None) -> Quote:
        """
        Return the live quote for *quote_id*.

        Raises QuoteExpired for unknown ids and for quotes whose expiry has
        been reached.
        """
        quote = self.get(quote_id)
        if quote is None:
            raise QuoteExpired()
        if is_expired(quote.expires_at, now or self.clock.now()):
            raise QuoteExpired()
        return quote

    def purge_expired(self, now: datetime | None = None) -> int:
        """Drop expired quotes; returns how many were removed."""
        moment = now or self.clock.now()
        with self._lock:
            stale = [qid for qid, q in self._quotes.items() if is_expired(q.expires_at, moment)]
            for qid in stale:
                del self._quotes[qid]
        if stale:
            logger.debug("Purged %d expired quotes", len(stale))
        return len(stale)
