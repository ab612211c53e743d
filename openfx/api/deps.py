"""
Process-wide service instances and the FastAPI dependencies that provide them.

Tests swap these out through ``app.dependency_overrides``.
"""

from openfx.core.clock import system_clock
from openfx.core.simulation import Simulation
from openfx.services.ledger import TransactionLedger
from openfx.services.quote_service import QuoteBook

simulation = Simulation.from_settings()
quote_book = QuoteBook(clock=system_clock)
ledger = TransactionLedger(simulation=simulation, clock=system_clock)


async def get_quote_book() -> QuoteBook:
    """FastAPI dependency that provides the quote book."""
    return quote_book


async def get_ledger() -> TransactionLedger:
    """FastAPI dependency that provides the transaction ledger."""
    return ledger


async def get_simulation() -> Simulation:
    """FastAPI dependency that provides the latency/failure simulation."""
    return simulation
