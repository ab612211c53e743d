"""
Payment and transaction status endpoints.

Pay flow:
  1. Resolve the quote (400 if unknown or expired)
  2. Simulated payment rail (502 on a simulated failure, safe to retry)
  3. Create the transaction in ``processing``
  4. Return the transaction id for polling
"""

import logging

from fastapi import APIRouter, Depends

from openfx.api.deps import get_ledger, get_quote_book, get_simulation
from openfx.api.errors import http_error
from openfx.core.simulation import Simulation
from openfx.errors import PaymentProcessingFailed, QuoteExpired, TransactionNotFound
from openfx.schemas.transaction import ErrorResponse, PayRequest, PayResponse, Transaction
from openfx.services.ledger import TransactionLedger
from openfx.services.quote_service import QuoteBook

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# POST /pay — Confirm payment against a quote
# ---------------------------------------------------------------------------


@router.post(
    "/pay",
    response_model=PayResponse,
    response_model_by_alias=True,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def pay(
    payload: PayRequest,
    quote_book: QuoteBook = Depends(get_quote_book),
    ledger: TransactionLedger = Depends(get_ledger),
    simulation: Simulation = Depends(get_simulation),
):
    """
    Confirm payment for ``quoteId`` and start a transaction.

    A failed transaction later on is reported through the transaction's
    status, not through this endpoint.
    """
    await simulation.delay()

    try:
        quote = quote_book.resolve(payload.quote_id)
    except QuoteExpired as exc:
        logger.info("Payment rejected: quote %s expired or unknown", payload.quote_id)
        raise http_error(exc)

    if simulation.payment_fails():
        logger.warning("Simulated payment failure for quote %s", quote.id)
        raise http_error(PaymentProcessingFailed())

    transaction_id = ledger.create_transaction(quote)
    return PayResponse(transaction_id=transaction_id)


# ---------------------------------------------------------------------------
# GET /transaction/{id} — Transaction status
# ---------------------------------------------------------------------------


@router.get(
    "/transaction/{transaction_id}",
    response_model=Transaction,
    response_model_by_alias=True,
    responses={404: {"model": ErrorResponse}},
)
async def get_transaction(
    transaction_id: str,
    ledger: TransactionLedger = Depends(get_ledger),
    simulation: Simulation = Depends(get_simulation),
):
    """Current snapshot of a transaction. ``failed`` is a normal 200 response."""
    await simulation.delay()

    try:
        return ledger.get_transaction(transaction_id)
    except TransactionNotFound as exc:
        raise http_error(exc)
