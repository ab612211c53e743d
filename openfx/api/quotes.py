"""
FX quote endpoint.

Prices a currency pair from the static rate table. Quotes are valid for
``FX_QUOTE_TTL_SECONDS`` and remembered in the quote book so ``/pay`` can
resolve them.
"""

import logging

from fastapi import APIRouter, Depends

from openfx.api.deps import get_quote_book, get_simulation
from openfx.api.errors import http_error
from openfx.core.simulation import Simulation
from openfx.errors import InvalidAmount, UnsupportedCurrencyPair
from openfx.schemas.quote import Quote, QuoteRequest
from openfx.schemas.transaction import ErrorResponse
from openfx.services.quote_service import QuoteBook

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/quote",
    response_model=Quote,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_quote(
    payload: QuoteRequest,
    quote_book: QuoteBook = Depends(get_quote_book),
    simulation: Simulation = Depends(get_simulation),
):
    """
    Get a quote for converting ``amount`` of ``sourceCurrency``.

    Returns the rate, fee (0.5%, minimum 1.50), total payable and the
    destination amount, plus ``expiresAt`` in Unix milliseconds.
    """
    await simulation.delay()

    try:
        quote = quote_book.issue(
            payload.source_currency.upper(),
            payload.destination_currency.upper(),
            payload.amount,
        )
    except (UnsupportedCurrencyPair, InvalidAmount) as exc:
        logger.info(
            "Quote rejected (%s): %s -> %s amount=%s",
            exc.code, payload.source_currency, payload.destination_currency, payload.amount,
        )
        raise http_error(exc)

    return quote
