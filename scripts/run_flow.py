"""
Manual end-to-end run — quote, pay, and poll one transfer in-process.

Usage:
    python scripts/run_flow.py [SOURCE] [DESTINATION] [AMOUNT]

Runs the API app through httpx's ASGI transport, so no server is needed.
Payment failures are disabled for the run; processing failures keep their
configured rate.
"""

import asyncio
import sys

import httpx

from openfx.api.deps import get_simulation
from openfx.client import OpenFXClient, PaymentSubmitter, QuoteLifecycle, TransactionPoller, quote_of
from openfx.config import settings
from openfx.core.simulation import Simulation
from openfx.currencies import format_amount
from openfx.main import app


async def main(source: str, destination: str, amount: float):
    """Run a single quote → pay → poll flow and print each step."""
    simulation = Simulation(processing_failure_rate=settings.PROCESSING_FAILURE_RATE)

    async def override_get_simulation():
        return simulation

    app.dependency_overrides[get_simulation] = override_get_simulation

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://openfx") as http:
        client = OpenFXClient(http)
        lifecycle = QuoteLifecycle()

        state = await lifecycle.request_quote(
            lambda: client.fetch_quote(source, destination, amount),
        )
        quote = quote_of(state)
        if quote is None:
            print(f"Quote failed: {state.message}")
            return

        print("=== Quote ===")
        print(f"  {format_amount(quote.source_amount, source)} -> "
              f"{format_amount(quote.destination_amount, destination)}")
        print(f"  rate {quote.fx_rate}  fee {format_amount(quote.fee, source)}  "
              f"total {format_amount(quote.total_payable, source)}")
        print(f"  valid for {lifecycle.seconds_left()}s")

        submitter = PaymentSubmitter(client.submit_payment)
        transaction_id = await submitter.submit(quote)
        await lifecycle.close()
        print(f"\nPaid: {transaction_id}\n")

        poller = TransactionPoller(client.fetch_transaction)
        async for snapshot in poller.poll_until_terminal(transaction_id):
            print(f"  [{snapshot.updated_at:%H:%M:%S}] {snapshot.status.value}")

    app.dependency_overrides.clear()


if __name__ == "__main__":
    args = sys.argv[1:]
    src = args[0] if len(args) > 0 else "USD"
    dst = args[1] if len(args) > 1 else "EUR"
    amt = float(args[2]) if len(args) > 2 else 100.0
    asyncio.run(main(src, dst, amt))
