"""
Async HTTP client for the OpenFX API.

Wraps ``httpx.AsyncClient`` and turns error responses back into the typed
domain errors of ``openfx.errors`` using the ``code`` in the response body.
"""

import logging

import httpx

from openfx.config import settings
from openfx.errors import OpenFXError, error_from_code
from openfx.schemas.quote import Quote, QuoteRequest
from openfx.schemas.transaction import PayRequest, PayResponse, Transaction

logger = logging.getLogger(__name__)


class OpenFXClient:
    """Client for ``/api/quote``, ``/api/pay`` and ``/api/transaction/{id}``."""

    def __init__(self, http: httpx.AsyncClient | None = None, base_url: str | None = None):
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL, timeout=10,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "OpenFXClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --- Endpoints ---

    async def fetch_quote(self, source_currency: str, destination_currency: str, amount: float) -> Quote:
        body = QuoteRequest(
            source_currency=source_currency,
            destination_currency=destination_currency,
            amount=amount,
        )
        resp = await self.http.post("/api/quote", json=body.model_dump(by_alias=True))
        self._raise_for_error(resp)
        return Quote.model_validate(resp.json())

    async def submit_payment(self, quote_id: str) -> str:
        body = PayRequest(quote_id=quote_id)
        resp = await self.http.post("/api/pay", json=body.model_dump(by_alias=True))
        self._raise_for_error(resp)
        return PayResponse.model_validate(resp.json()).transaction_id

    async def fetch_transaction(self, transaction_id: str) -> Transaction:
        resp = await self.http.get(f"/api/transaction/{transaction_id}")
        self._raise_for_error(resp)
        return Transaction.model_validate(resp.json())

    # --- Helpers ---

    @staticmethod
    def _raise_for_error(resp: httpx.Response) -> None:
        if resp.is_success:
            return
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        error = error_from_code(body.get("code"), body.get("error"))
        if type(error) is OpenFXError:
            logger.warning(
                "Unexpected %s from %s %s: %s",
                resp.status_code, resp.request.method, resp.request.url.path, body,
            )
        raise error
