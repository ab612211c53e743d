"""
Client-side payment submission with an idempotency latch.

A quote can be paid at most once: the latch is held while a submission is
outstanding and stays engaged after it succeeds. A failed submission
releases it so the user can retry.
"""

import logging
from datetime import datetime
from typing import Awaitable, Callable

from openfx.core.clock import Clock, is_expired, system_clock
from openfx.errors import PaymentAlreadySubmitted, QuoteExpired
from openfx.schemas.quote import Quote

logger = logging.getLogger(__name__)

SubmitFn = Callable[[str], Awaitable[str]]


class PaymentSubmitter:
    """Guards ``submit_payment`` calls against expired quotes and double submits."""

    def __init__(self, submit: SubmitFn, clock: Clock = system_clock):
        self._submit = submit
        self.clock = clock
        self._in_flight: set[str] = set()
        self._paid: dict[str, str] = {}

    def is_submitting(self, quote_id: str) -> bool:
        return quote_id in self._in_flight

    def transaction_for(self, quote_id: str) -> str | None:
        """Transaction id created for *quote_id*, if it was paid through this submitter."""
        return self._paid.get(quote_id)

    async def submit(self, quote: Quote, now: datetime | None = None) -> str:
        """
        Pay for *quote* and return the new transaction id.

        Raises QuoteExpired without contacting the server if the quote's
        expiry has been reached, and PaymentAlreadySubmitted if a submission
        for this quote is outstanding or already succeeded. Errors from the
        server propagate after the latch is released.
        """
        if quote.id in self._in_flight or quote.id in self._paid:
            raise PaymentAlreadySubmitted()
        if is_expired(quote.expires_at, now or self.clock.now()):
            logger.info("Refusing to pay expired quote %s", quote.id)
            raise QuoteExpired("This quote has expired. Please go back and get a new quote.")

        self._in_flight.add(quote.id)
        try:
            transaction_id = await self._submit(quote.id)
        finally:
            self._in_flight.discard(quote.id)

        self._paid[quote.id] = transaction_id
        logger.info("Quote %s paid: transaction %s", quote.id, transaction_id)
        return transaction_id
