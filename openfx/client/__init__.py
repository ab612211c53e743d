"""
Async client side of the flow: API client, quote lifecycle, payment latch,
and transaction poller.
"""

from openfx.client.api_client import OpenFXClient
from openfx.client.payment import PaymentSubmitter
from openfx.client.poller import PollingHandle, TransactionPoller
from openfx.client.quote_lifecycle import (
    Error,
    Expired,
    Idle,
    Loading,
    QuoteLifecycle,
    QuoteState,
    Success,
    quote_of,
)

__all__ = [
    "OpenFXClient",
    "PaymentSubmitter",
    "TransactionPoller",
    "PollingHandle",
    "QuoteLifecycle",
    "QuoteState",
    "Idle",
    "Loading",
    "Success",
    "Expired",
    "Error",
    "quote_of",
]
