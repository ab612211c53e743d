"""Tests for the payment latch and the HTTP API client."""

import asyncio

import httpx
import pytest

from openfx.client.api_client import OpenFXClient
from openfx.client.payment import PaymentSubmitter
from openfx.errors import (
    InvalidAmount,
    OpenFXError,
    PaymentAlreadySubmitted,
    PaymentProcessingFailed,
    QuoteExpired,
    TransactionNotFound,
    UnsupportedCurrencyPair,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class RecordingSubmit:
    """submit_payment stand-in that counts calls and can be told to fail or block."""

    def __init__(self):
        self.calls = []
        self.fail_with = None
        self.gate = None

    async def __call__(self, quote_id):
        self.calls.append(quote_id)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return f"TXN-{len(self.calls):08d}"


@pytest.fixture
def submit_fn():
    return RecordingSubmit()


@pytest.fixture
def submitter(submit_fn, clock):
    return PaymentSubmitter(submit_fn, clock=clock)


# ---------------------------------------------------------------------------
# PaymentSubmitter
# ---------------------------------------------------------------------------


class TestPaymentSubmitter:

    @pytest.mark.asyncio
    async def test_submit_returns_transaction_id(self, submitter, submit_fn, make_quote):
        quote = make_quote()
        txn_id = await submitter.submit(quote)

        assert txn_id == "TXN-00000001"
        assert submit_fn.calls == [quote.id]
        assert submitter.transaction_for(quote.id) == txn_id
        assert not submitter.is_submitting(quote.id)

    @pytest.mark.asyncio
    async def test_expired_quote_never_submitted(self, submitter, submit_fn, make_quote, clock):
        quote = make_quote()
        clock.advance(30)

        with pytest.raises(QuoteExpired, match="Please go back and get a new quote"):
            await submitter.submit(quote)

        assert submit_fn.calls == []

    @pytest.mark.asyncio
    async def test_double_click_submits_once(self, submitter, submit_fn, make_quote):
        quote = make_quote()
        submit_fn.gate = asyncio.Event()

        first = asyncio.create_task(submitter.submit(quote))
        await asyncio.sleep(0)
        assert submitter.is_submitting(quote.id)

        with pytest.raises(PaymentAlreadySubmitted):
            await submitter.submit(quote)

        submit_fn.gate.set()
        await first
        assert len(submit_fn.calls) == 1

    @pytest.mark.asyncio
    async def test_paid_quote_cannot_be_paid_again(self, submitter, submit_fn, make_quote):
        quote = make_quote()
        await submitter.submit(quote)
        with pytest.raises(PaymentAlreadySubmitted):
            await submitter.submit(quote)
        assert len(submit_fn.calls) == 1

    @pytest.mark.asyncio
    async def test_failure_releases_latch(self, submitter, submit_fn, make_quote):
        quote = make_quote()
        submit_fn.fail_with = PaymentProcessingFailed()

        with pytest.raises(PaymentProcessingFailed):
            await submitter.submit(quote)
        assert not submitter.is_submitting(quote.id)
        assert submitter.transaction_for(quote.id) is None

        submit_fn.fail_with = None
        assert await submitter.submit(quote) == "TXN-00000002"


# ---------------------------------------------------------------------------
# OpenFXClient against the app
# ---------------------------------------------------------------------------


class TestOpenFXClient:

    @pytest.mark.asyncio
    async def test_quote_pay_fetch(self, api):
        quote = await api.fetch_quote("USD", "EUR", 100)
        assert quote.total_payable == 101.5

        txn_id = await api.submit_payment(quote.id)
        txn = await api.fetch_transaction(txn_id)
        assert txn.id == txn_id
        assert txn.source_amount == 100.0

    @pytest.mark.asyncio
    async def test_error_codes_map_to_types(self, api, simulation):
        with pytest.raises(UnsupportedCurrencyPair):
            await api.fetch_quote("USD", "XYZ", 100)
        with pytest.raises(InvalidAmount):
            await api.fetch_quote("USD", "EUR", -1)
        with pytest.raises(QuoteExpired):
            await api.submit_payment("QT-UNKNOWN")
        with pytest.raises(TransactionNotFound):
            await api.fetch_transaction("TXN-MISSING1")

        quote = await api.fetch_quote("USD", "EUR", 100)
        simulation.pay_failure_rate = 1.0
        with pytest.raises(PaymentProcessingFailed):
            await api.submit_payment(quote.id)

    @pytest.mark.asyncio
    async def test_expired_quote_scenario(self, api, ledger, clock):
        """A quote held past its expiry is refused locally and never reaches the ledger."""
        quote = await api.fetch_quote("USD", "EUR", 100)
        clock.advance(31)

        submitter = PaymentSubmitter(api.submit_payment, clock=clock)
        with pytest.raises(QuoteExpired):
            await submitter.submit(quote)

        assert len(ledger.repository) == 0

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        def handler(request):
            return httpx.Response(503, text="upstream unavailable")

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
        async with OpenFXClient(http) as api:
            with pytest.raises(OpenFXError) as exc_info:
                await api.fetch_transaction("TXN-ANY00001")
        await http.aclose()

        assert type(exc_info.value) is OpenFXError

    @pytest.mark.asyncio
    async def test_owns_default_client(self):
        api = OpenFXClient(base_url="http://localhost:9")
        assert api.http.base_url.host == "localhost"
        await api.aclose()
        assert api.http.is_closed
