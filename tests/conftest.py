"""
Shared test fixtures for OpenFX.

Provides a manual clock, deterministic simulation, fresh quote book and
ledger per test, and an async HTTP client wired to the app through
dependency overrides.
"""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from openfx.api.deps import get_ledger, get_quote_book, get_simulation
from openfx.client.api_client import OpenFXClient
from openfx.core.simulation import Simulation
from openfx.models.transaction import TransactionStatus
from openfx.schemas.transaction import Transaction
from openfx.services.ledger import TransactionLedger
from openfx.services.quote_service import QuoteBook, compute_quote

START = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# --- Clock ---


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = START):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float = 0, ms: int = 0) -> datetime:
        self.current += timedelta(seconds=seconds, milliseconds=ms)
        return self.current


@pytest.fixture
def clock():
    """Frozen clock starting at 2025-01-01 12:00:00 UTC."""
    return ManualClock()


# --- Services ---


@pytest.fixture
def simulation():
    """Simulation with no latency and no failures (tests flip rates as needed)."""
    return Simulation.deterministic()


@pytest.fixture
def quote_book(clock):
    return QuoteBook(clock=clock)


@pytest.fixture
def ledger(clock, simulation):
    return TransactionLedger(
        simulation=simulation,
        clock=clock,
        sent_after_seconds=3,
        settled_after_seconds=6,
    )


@pytest.fixture
def make_quote(clock):
    """Factory for quotes priced at the current clock time."""

    def _make(source="USD", destination="EUR", amount=100):
        return compute_quote(source, destination, amount, now=clock.now())

    return _make


@pytest.fixture
def make_snapshot():
    """Factory for Transaction snapshots with a given status."""

    def _make(status=TransactionStatus.PROCESSING, transaction_id="TXN-TEST0001"):
        return Transaction(
            id=transaction_id,
            status=status,
            source_currency="USD",
            destination_currency="EUR",
            source_amount=100.0,
            destination_amount=92.0,
            fx_rate=0.92,
            fee=1.5,
            created_at=START,
            updated_at=START,
        )

    return _make


# --- HTTP client ---


@pytest_asyncio.fixture
async def client(quote_book, ledger, simulation):
    """
    Async HTTP test client with the quote book, ledger and simulation
    overridden to use the per-test instances.
    """
    from openfx.main import app

    async def override_get_quote_book():
        return quote_book

    async def override_get_ledger():
        return ledger

    async def override_get_simulation():
        return simulation

    app.dependency_overrides[get_quote_book] = override_get_quote_book
    app.dependency_overrides[get_ledger] = override_get_ledger
    app.dependency_overrides[get_simulation] = override_get_simulation

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def api(client):
    """OpenFXClient talking to the test app."""
    return OpenFXClient(client)


# --- Sample Data ---


@pytest.fixture
def sample_quote_request():
    """USD to EUR, 100 units."""
    return {"sourceCurrency": "USD", "destinationCurrency": "EUR", "amount": 100}
